"""
Client HTTP vers la plateforme d'automatisation (n8n) :
génération PDF des rapports, transcription audio, rédaction de devis par IA.
"""
import logging
from typing import Any, Dict, Optional

import requests

from ..config import AutomationSettings
from ..errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class AutomationClient:
    def __init__(self, settings: AutomationSettings):
        self.settings = settings

    def _url(self, path: str) -> Optional[str]:
        if not self.settings.base_url:
            return None
        return f"{self.settings.base_url.rstrip('/')}/{path.lstrip('/')}"

    def generate_report_pdf(self, report_id: str) -> Optional[str]:
        """Best-effort : renvoie l'URL du PDF ou None, ne lève jamais."""
        url = self._url("webhook/report-pdf")
        if not url:
            logger.warning("PDF rapport %s non généré : N8N_BASE_URL absent", report_id)
            return None
        try:
            res = requests.post(url, json={"report_id": report_id}, timeout=self.settings.timeout)
            if not res.ok:
                logger.warning("PDF rapport %s non généré : HTTP %s", report_id, res.status_code)
                return None
            data = res.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Erreur PDF rapport %s (non bloquant): %s", report_id, e)
            return None
        if not isinstance(data, dict):
            logger.warning("PDF rapport %s : réponse inattendue (%s)", report_id, type(data).__name__)
            return None
        return data.get("pdf_url")

    def request_transcription(self, audio_url: str, callback_url: str,
                              report_id: Optional[str] = None, intervention_id: Optional[str] = None):
        url = self.settings.transcribe_webhook_url
        if not url:
            raise ConfigurationError("Webhook de transcription non configuré")
        payload = {
            "audio_url": audio_url,
            "report_id": report_id,
            "intervention_id": intervention_id,
            "callback_url": callback_url,
        }
        try:
            res = requests.post(url, json=payload, timeout=self.settings.timeout)
        except requests.RequestException as e:
            logger.error("Transcription injoignable: %s", e)
            raise UpstreamError("Erreur lors de l'appel au service de transcription")
        if not res.ok:
            logger.error("Transcription refusée: HTTP %s", res.status_code)
            raise UpstreamError("Erreur lors de l'appel au service de transcription")

    def draft_quote(self, text: str) -> Dict[str, Any]:
        url = self._url("webhook/quote-agent")
        if not url:
            raise ConfigurationError("Agent devis non configuré")
        try:
            res = requests.post(url, json={"text": text}, timeout=self.settings.timeout)
            if not res.ok:
                raise UpstreamError(f"Erreur serveur: {res.status_code}")
            data = res.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Agent devis injoignable: %s", e)
            raise UpstreamError("Impossible de contacter l'agent devis")
        if not isinstance(data, dict):
            logger.error("Agent devis : réponse inattendue (%s)", type(data).__name__)
            raise UpstreamError("Réponse invalide de l'agent devis")
        return {
            "message": data.get("message") or data.get("output") or "Devis généré avec succès.",
            "quote_id": data.get("quote_id"),
        }


def create_automation_client(settings: AutomationSettings) -> AutomationClient:
    return AutomationClient(settings)
