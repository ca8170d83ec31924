# main.py

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from storefront.core.config import get_settings  # noqa: E402
from storefront.logging import setup_logging  # noqa: E402
from storefront.main import create_app  # noqa: E402

settings = get_settings()
setup_logging(settings.LOG_LEVEL)

app = create_app(settings)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
