# Helper for loading the token-signing SECRET_KEY from Secret Manager at runtime.
# Usage:
#   - call secret_helper.inject_secret_key() before the Flask config is built
#     (create_app does this for you)
#
# This helper:
#  - keeps a SECRET_KEY env var when one is present (local development)
#  - otherwise reads the secret named by SECRET_KEY_SECRET_NAME in the project GCP_PROJECT
#  - sets os.environ['SECRET_KEY'] so cinereview.config picks it up
#  - logs errors rather than crashing (the app then signs tokens with the dev key)

import os
from typing import Optional

from google.cloud import secretmanager

from cinereview.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SECRET_NAME = "cinereview-secret-key"


def get_secret_from_manager(project_id: str, secret_name: str) -> str:
    client = secretmanager.SecretManagerServiceClient()
    name = f"projects/{project_id}/secrets/{secret_name}/versions/latest"
    response = client.access_secret_version(request={"name": name})
    return response.payload.data.decode("utf-8")


def load_secret_key(project_id: Optional[str] = None, secret_name: Optional[str] = None) -> Optional[str]:
    """
    Return the signing key. Priority:
      1) SECRET_KEY environment variable
      2) Secret Manager secret identified by (project_id, secret_name)
    Returns None when neither source yields a key.
    """
    env_val = os.environ.get("SECRET_KEY")
    if env_val:
        logger.debug("secret_key_source", source="environment")
        return env_val

    project_id = project_id or os.environ.get("GCP_PROJECT")
    secret_name = secret_name or os.environ.get("SECRET_KEY_SECRET_NAME", DEFAULT_SECRET_NAME)

    if not project_id:
        logger.debug("secret_key_lookup_skipped", reason="GCP_PROJECT not set")
        return None

    # Without GCP credentials the client would hang on metadata lookups
    is_gcp = os.environ.get("GAE_ENV") or os.environ.get("CLOUD_RUN_SERVICE") or os.environ.get("GOOGLE_CLOUD_PROJECT")
    if not is_gcp and not os.environ.get("ENABLE_GCP_SECRETS"):
        logger.warning("secret_key_lookup_skipped", reason="not running in GCP and ENABLE_GCP_SECRETS not set")
        return None

    try:
        key = get_secret_from_manager(project_id, secret_name)
        logger.info("secret_key_source", source="secret_manager", secret_name=secret_name)
        return key
    except Exception as e:
        logger.error("secret_key_lookup_failed", secret_name=secret_name, error=str(e))
        return None


def inject_secret_key(project_id: Optional[str] = None, secret_name: Optional[str] = None) -> bool:
    """
    Ensure os.environ['SECRET_KEY'] is set.
    Returns True if the key was set (from env or Secret Manager), False otherwise.
    """
    if os.environ.get("SECRET_KEY"):
        return True

    key = load_secret_key(project_id=project_id, secret_name=secret_name)
    if key:
        os.environ["SECRET_KEY"] = key
        return True

    return False
