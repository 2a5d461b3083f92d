import os
from contextlib import contextmanager

from dotenv import load_dotenv
from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base

from ledger.errors import StorageError
from utils.logging_utils import get_logger

load_dotenv()

LOGGER = get_logger(__name__)

# Declarative base disponible desde la importación para evitar problemas
Base = declarative_base()


def _install_sqlite_locking(engine, lock_timeout: float):
    """
    SQLite no soporta SELECT ... FOR UPDATE. Para que dos conexiones no lean
    el mismo saldo a la vez, cada transacción empieza con BEGIN IMMEDIATE,
    que toma el bloqueo de escritura de la base de datos desde el principio.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # desactivamos el BEGIN implícito de pysqlite, lo emitimos nosotros
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute(f"PRAGMA busy_timeout = {int(lock_timeout * 1000)}")
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class _DB:
    def __init__(self):
        self.engine = None
        self.SessionLocal = None
        self.session_factory = None
        self.url = None
        self.echo = False
        self._initialized = False
        self.connected = False

    def init_app(self, db_url: str | None = None, echo: bool | None = None, **engine_kwargs):
        """
        Inicializa engine y SessionLocal. Si no hay DATABASE_URL no lanza excepción:
        deja el objeto sin engine y los scripts (audit_ledger, migraciones)
        avisan de que falta configurar la base de datos.
        """
        if db_url is None:
            db_url = os.environ.get("DATABASE_URL")

        if echo is None:
            echo_env = os.environ.get("DB_ECHO", "False")
            echo = echo_env.lower() in ("1", "true", "yes")

        if not db_url:
            # No hay URL: dejamos todo a None, quien llame decide qué hacer
            self.engine = None
            self.SessionLocal = None
            self.session_factory = None
            self.url = None
            self.echo = echo
            self._initialized = True
            self.connected = False
            LOGGER.warning("DATABASE_URL no definida; base de datos sin configurar")
            return

        # Si ya estaba inicializado con la misma URL, no la recreamos
        if self.url == db_url and self.engine is not None:
            self.echo = echo
            self._initialized = True
            return

        if self.engine is not None:
            self.close_all()

        self.url = db_url
        self.echo = echo
        is_sqlite = db_url.startswith("sqlite")
        if is_sqlite:
            lock_timeout = float(os.environ.get("DB_LOCK_TIMEOUT", "5"))
            engine_kwargs.setdefault("connect_args", {}).setdefault("check_same_thread", False)
        # pool_pre_ping ayuda a reconectar conexiones muertas
        self.engine = create_engine(db_url, echo=echo, future=True, pool_pre_ping=True, **engine_kwargs)
        if is_sqlite:
            _install_sqlite_locking(self.engine, lock_timeout)
        self.session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self.SessionLocal = scoped_session(self.session_factory)
        self._initialized = True
        # no asumimos connected hasta que check_connection lo confirme
        self.connected = False
        LOGGER.info("Base de datos inicializada (%s)", self.engine.url.render_as_string(hide_password=True))

    def _require_engine(self):
        if self.engine is None or self.session_factory is None:
            raise RuntimeError("DB no inicializado. Llama a db.init_app() primero o configura DATABASE_URL.")

    def session(self):
        self._require_engine()
        return self.SessionLocal()

    @contextmanager
    def unit_of_work(self):
        """
        Abre una sesión nueva dentro de una transacción.

        Hace commit si el bloque termina bien y rollback si lanza. Los errores
        del ledger salen tal cual; los de SQLAlchemy se convierten en StorageError.
        """
        self._require_engine()
        session = self.session_factory()
        try:
            with session.begin():
                yield session
        except SQLAlchemyError as exc:
            raise StorageError(f"Error de base de datos: {exc}") from exc
        finally:
            session.close()

    def create_all(self):
        self._require_engine()
        # importamos los modelos para que queden registrados en Base.metadata
        import models.account  # noqa: F401
        import models.category  # noqa: F401
        import models.transaction  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self):
        self._require_engine()
        Base.metadata.drop_all(bind=self.engine)

    def check_connection(self, db_url: str | None = None, timeout_seconds: int = 5) -> tuple[bool, str | None]:
        """
        Intenta conectar con la URL (si se pasa) o con self.url.
        Devuelve (True, None) o (False, mensaje_error).
        """
        url = db_url or self.url
        if url is None:
            return False, "No hay DATABASE_URL definida."

        # Crear un engine temporal para probar la conexión sin alterar self.engine
        connect_args = {} if url.startswith("sqlite") else {"connect_timeout": timeout_seconds}
        try:
            engine = create_engine(url, future=True, connect_args=connect_args)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            engine.dispose()
        except SQLAlchemyError as exc:
            # devolvemos el mensaje para que el script lo muestre
            return False, str(exc)
        if url == self.url:
            self.connected = True
        return True, None

    def close_all(self):
        """
        Cierra sesiones y engine (útil para reconfigurar).
        """
        if self.SessionLocal is not None:
            self.SessionLocal.remove()
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.SessionLocal = None
        self.session_factory = None
        self.url = None
        self._initialized = False
        self.connected = False


# exportados por el paquete
db = _DB()
db.Base = Base
