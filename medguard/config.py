import os


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")

    BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    INSTANCE_DIR = os.path.join(BASE_DIR, "instance")

    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(INSTANCE_DIR, "uploads"))
    # anexos de atestado (pdf/imagem) - 10 MB
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(10 * 1024 * 1024)))

    DB_PATH = os.path.join(INSTANCE_DIR, "medguard.db")

    SQLALCHEMY_DATABASE_URI = os.getenv(
        "SQLALCHEMY_DATABASE_URI",
        "sqlite:///" + DB_PATH.replace("\\", "/"),
    )

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # login "demonstração" sem banco (dados em um JSON por sessão)
    DEMO_MODE_ENABLED = _env_bool("DEMO_MODE_ENABLED", True)
    # arquivos de sessões demo sem logout são apagados após este prazo (segundos)
    DEMO_DATA_MAX_AGE = int(os.getenv("DEMO_DATA_MAX_AGE", str(24 * 60 * 60)))

    AUDIT_LOG_LIMIT = int(os.getenv("AUDIT_LOG_LIMIT", "50"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE", "")
