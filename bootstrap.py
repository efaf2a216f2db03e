# bootstrap.py - prepares and starts the project based on DEVELOPMENT_MODE env variable
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

DEVELOPMENT_MODE = os.getenv("DEVELOPMENT_MODE", "dev").lower()
PROJECT_DIR = Path(__file__).parent

def run_command(cmd):
    print("> " + cmd)
    rc = os.system(cmd)
    if rc != 0:
        print("Command failed:", cmd)
        sys.exit(rc)

def dev():
    print("Building in development mode (DEVELOPMENT_MODE='dev').")
    print("Installing the project with test extras...")
    run_command(f'pip install -e "{PROJECT_DIR}[test]"')
    print("Applying migrations...")
    run_command("python manage.py migrate")
    print("Starting dev server on 0.0.0.0:8000")
    run_command("python manage.py runserver 0.0.0.0:8000")

def prod():
    print("Preparing release (DEVELOPMENT_MODE='prod').")
    if not os.getenv("STRIPE_WEBHOOK_SECRET"):
        print("STRIPE_WEBHOOK_SECRET is not set; enrollments will never be confirmed.")
        sys.exit(1)
    run_command(f'pip install "{PROJECT_DIR}"')
    run_command("python manage.py migrate --noinput")
    run_command("python manage.py collectstatic --noinput")
    run_command("python manage.py check --deploy")

def main():
    if DEVELOPMENT_MODE in ("dev", "development"):
        dev()
    elif DEVELOPMENT_MODE in ("prod", "production"):
        prod()
    else:
        print("Unknown DEVELOPMENT_MODE:", DEVELOPMENT_MODE)
        print("Use 'dev' or 'prod'.")
        sys.exit(1)

if __name__ == "__main__":
    main()
