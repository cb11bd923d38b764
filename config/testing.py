import os

from config import env_flag, payslip_company

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_payroll_test"),
}
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "2"))
DB_POOL_TIMEOUT = float(os.getenv("DB_POOL_TIMEOUT", "2"))

DEBUG = False
TESTING = True
EXPOSE_ERROR_DETAIL = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")

PAYSLIP_COMPANY = payslip_company()
