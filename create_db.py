import os
from dotenv import load_dotenv
from pathlib import Path
from sqlalchemy import text

load_dotenv(dotenv_path=Path(__file__).with_name(".env"), override=True)

from aibuilder.db.engine import make_engine, init_db  # import AFTER load_dotenv

def main():
    dsn = os.getenv("DATABASE_URL")
    if not dsn:
        raise RuntimeError("DATABASE_URL is not set. Put it in your .env")
    engine = make_engine(dsn)
    print("Creating tables…")
    init_db(engine)
    # simple connectivity check
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    print("Done.")

if __name__ == "__main__":
    main()
