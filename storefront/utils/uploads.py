# storefront/utils/uploads.py
from storefront.utils.settings import BASE_UPLOAD_URL


def public_url(path: str | None) -> str:
    """Stored file names are served under BASE_UPLOAD_URL, absolute urls are kept."""
    if not path:
        return ""
    if path.startswith(("http://", "https://")):
        return path
    return f"{BASE_UPLOAD_URL.rstrip('/')}/{path.lstrip('/')}"
