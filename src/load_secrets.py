import os
from dotenv import load_dotenv

load_dotenv()

database_backend = os.getenv("DATABASE_BACKEND", "sqlite")
user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT")
db_name = os.getenv("DB_NAME")
sqlite_path = os.getenv("SQLITE_PATH")
log_level = os.getenv("LOG_LEVEL", "INFO")
