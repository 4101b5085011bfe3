"""
Stockage des médias (photos, signatures) sur Cloudinary.
Un rapport ne doit jamais référencer une ressource locale : les data-URL sont
uploadées et remplacées par leur URL permanente avant l'écriture en base.
"""
import logging
from typing import Any, Dict, List, Optional

import cloudinary
import cloudinary.uploader

from ..config import StorageSettings
from ..errors import BusinessRuleError, ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


def is_permanent_url(value: Optional[str]) -> bool:
    return bool(value) and value.startswith(("http://", "https://"))


class MediaStorage:
    def __init__(self, settings: StorageSettings):
        self.settings = settings
        self.configured = bool(settings.cloud_name)
        if self.configured:
            cloudinary.config(
                cloud_name=settings.cloud_name,
                api_key=settings.api_key,
                api_secret=settings.api_secret,
                secure=True,
            )

    def upload(self, data: str, folder: str, public_id: Optional[str] = None) -> str:
        if not self.configured:
            raise ConfigurationError("Stockage des médias non configuré")
        try:
            res = cloudinary.uploader.upload(data, folder=folder, public_id=public_id, resource_type="auto")
        except Exception as e:
            logger.error("Échec upload Cloudinary (%s): %s", folder, e)
            raise UpstreamError(f"Échec upload: {e}")
        url = res.get("secure_url")
        if not url:
            raise UpstreamError("Échec upload: URL manquante")
        return url

    def persist_media(self, value: Optional[str], folder: str, public_id: Optional[str] = None) -> Optional[str]:
        if not value or is_permanent_url(value):
            return value
        if not value.startswith("data:"):
            # blob:, chemin local... : rien qu'on puisse récupérer côté serveur
            raise BusinessRuleError("Média non transférable : seules les URL http(s) et data-URL sont acceptées")
        return self.upload(value, folder, public_id=public_id)

    def persist_photos(self, photos: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        stored = []
        for photo in photos:
            item = dict(photo)
            item["url"] = self.persist_media(item.get("url"), self.settings.photos_folder)
            stored.append(item)
        return stored

    def persist_signature(self, signature: Optional[str], intervention_id: str) -> Optional[str]:
        return self.persist_media(signature, self.settings.signatures_folder, public_id=f"intervention-{intervention_id}")


def create_storage_client(settings: StorageSettings) -> MediaStorage:
    return MediaStorage(settings)
