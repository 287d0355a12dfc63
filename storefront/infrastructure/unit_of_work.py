from sqlalchemy.orm import Session, sessionmaker
from .repository import ProductRepository, OrderRepository, AdminRepository, UserRepository

class UnitOfWork:
    """One session, one transaction.

    Entering opens a session and binds the repositories to it. Leaving with an
    exception rolls back; leaving normally without ``commit()`` discards any
    pending writes when the session closes. Objects loaded inside stay usable
    after exit (the session factory is built with ``expire_on_commit=False``).
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
        self.session: Session = None

    def __enter__(self) -> "UnitOfWork":
        self.session = self.session_factory()
        self.products = ProductRepository(self.session)
        self.orders = OrderRepository(self.session)
        self.admins = AdminRepository(self.session)
        self.users = UserRepository(self.session)
        return self

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is not None:
                self.session.rollback()
        finally:
            self.session.close()

    def commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()
