import uvicorn

from app.core.app_factory import create_app
from app.core.config import settings
from app.db.session import init_db

app = create_app()

# Local convenience; other environments manage the schema outside this service.
if settings.app_env == "development":
    init_db()


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.app.debug)
