from contextlib import contextmanager


class TenantRepo:
    """
    Every query goes through _query(), which pins tenant_id. Subclasses set
    `model` and never call session.query() themselves.
    """

    model = None

    def __init__(self, session, tenant_id: int):
        if tenant_id is None:
            raise ValueError("tenant_id is required")
        self.session = session
        self.tenant_id = tenant_id

    def _query(self, model=None):
        model = model or self.model
        return self.session.query(model).filter(model.tenant_id == self.tenant_id)

    def get(self, row_id: int, for_update: bool = False):
        q = self._query().filter(self.model.id == row_id)
        if for_update:
            q = q.with_for_update()
        return q.first()

    def add(self, row):
        row.tenant_id = self.tenant_id
        self.session.add(row)
        self.session.flush()
        return row

    def delete(self, row):
        self.session.delete(row)
        self.session.flush()


@contextmanager
def unit_of_work(session):
    """Commit when the block finishes, roll back everything on any exception."""
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def paginate(query, page: int, limit: int):
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    pages = (total + limit - 1) // limit if limit else 0
    return rows, {"page": page, "limit": limit, "total": total, "pages": pages}
