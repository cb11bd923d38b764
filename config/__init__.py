import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module, development by default
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def payslip_company() -> dict:
    return {
        "name": os.getenv("PAYSLIP_COMPANY_NAME", "Zoomedia Inc"),
        "address_lines": [
            line.strip()
            for line in os.getenv(
                "PAYSLIP_COMPANY_ADDRESS", "21023 Pearson Point Road|Gateway Avenue"
            ).split("|")
            if line.strip()
        ],
    }
