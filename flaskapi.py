import os
from aibuilder import create_app

app = create_app()

if __name__ == "__main__":
    app.run(port=int(os.environ.get("SERVER_PORT", "2022")))
