"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.checkout.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database handle (engine + session maker), built once at bootstrap
    database = providers.Singleton(Database, db_url=config_service.provided.DATABASE_URL_ASYNC)

    # One fresh unit of work per use-case attempt; inject `.provider` to get the factory
    unit_of_work = providers.Factory(SqlAlchemyUnitOfWork, session_factory=database.provided.session)

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)


container = Container()


async def cleanup() -> None:
    database = container.database()
    await database.dispose()
    container.reset_singletons()
