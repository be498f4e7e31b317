import os
import secrets
from werkzeug.utils import secure_filename
from flask import current_app

ALLOWED_DEFAULT = {".pdf", ".png", ".jpg", ".jpeg", ".webp"}


def save_upload(file_storage, subdir: str = "certificates", allowed_exts=None) -> tuple[str, str]:
    """Salva upload e retorna (stored_filename, original_filename)."""
    if allowed_exts is None:
        allowed_exts = ALLOWED_DEFAULT

    original = file_storage.filename or "arquivo"
    filename = secure_filename(original)
    _, ext = os.path.splitext(filename.lower())
    if ext not in allowed_exts:
        raise ValueError(f"Tipo de arquivo não permitido: {ext or original}")

    token = secrets.token_hex(8)
    stored = f"{token}{ext}"

    folder = upload_folder(subdir)
    os.makedirs(folder, exist_ok=True)

    file_storage.save(os.path.join(folder, stored))

    return stored, original


def upload_folder(subdir: str = "certificates") -> str:
    folder = current_app.config["UPLOAD_FOLDER"]
    return os.path.join(folder, subdir) if subdir else folder


def remove_upload(stored: str, subdir: str = "certificates") -> None:
    if not stored:
        return
    path = os.path.join(upload_folder(subdir), os.path.basename(stored))
    if os.path.exists(path):
        os.remove(path)
