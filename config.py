import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / '.env')


class Config:
    # Environment
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')

    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Supabase configuration
    SUPABASE_URL = os.getenv('SUPABASE_URL')
    SUPABASE_KEY = os.getenv('SUPABASE_KEY')
    CUSTOMERS_TABLE = os.getenv('CUSTOMERS_TABLE', 'customers')
    MESSAGES_TABLE = os.getenv('MESSAGES_TABLE', 'messages')
    PDF_TEMPLATES_TABLE = os.getenv('PDF_TEMPLATES_TABLE', 'pdf_templates')
    TEMPLATES_BUCKET = os.getenv('TEMPLATES_BUCKET', 'templates')

    # Template storage: 'supabase' or 'local'
    TEMPLATE_STORE_BACKEND = os.getenv('TEMPLATE_STORE_BACKEND', 'supabase')
    LOCAL_TEMPLATES_DIR = os.getenv(
        'LOCAL_TEMPLATES_DIR', str(Path(__file__).parent / 'pdf_templates')
    )

    # OpenAI configuration
    OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')

    # Dealership
    SALESPERSON_NAME = os.getenv('SALESPERSON_NAME', 'Stephen Schreck')
    DEALERSHIP_TIMEZONE = os.getenv('DEALERSHIP_TIMEZONE', 'America/New_York')
    LICENSE_STATE = os.getenv('LICENSE_STATE', 'OH')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


def configure_logging(level: str = None) -> None:
    """Configure root logging for scripts and the web shell."""
    logging.basicConfig(
        level=getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
