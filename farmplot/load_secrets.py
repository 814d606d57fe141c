import os
from dotenv import load_dotenv

load_dotenv()

user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT", "5432")
db_name = os.getenv("DB_NAME")
database_url = os.getenv("DATABASE_URL")
pepper_data = os.getenv("PEPPER_DATA", "")
server_port = int(os.getenv("PORT", "8080"))
log_level = os.getenv("LOG_LEVEL", "INFO").upper()

if __name__ == "__main__":
    print(user, host, port, db_name, database_url, server_port, log_level)
