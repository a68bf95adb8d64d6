# samaritan_core/transport/transport_http.py
import requests
from samaritan_core.logger import get_logger
from samaritan_core.transport.transport_base import BaseTransport

log = get_logger("Samaritan.Transport.HTTP")


class HTTPAdapter(BaseTransport):
    """
    HTTP transport adapter posting contract events to an indexer.

    Each event is POSTed as JSON to ``{base_url}/events/{topic}``. A bearer
    token, when set, is sent in the Authorization header.
    """

    name = "http"

    def __init__(self, base_url: str, token: str = None, timeout: float = 5):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token = token

    def publish(self, topic: str, payload, headers=None, key=None):
        url = f"{self.base_url}/events/{topic}"
        req_headers = {"Content-Type": "application/json"}
        req_headers.update(headers or {})
        if self._token:
            req_headers["Authorization"] = f"Bearer {self._token}"

        log.debug(f"[HTTP PUB] → {url}")
        try:
            res = requests.post(url, json=self.to_dict(payload), headers=req_headers, timeout=self.timeout)
            if res.ok:
                log.info(f"[HTTP PUB] {res.status_code} {res.reason} topic={topic}")
                return {"status": res.status_code}
            log.error(f"[HTTP PUB] {res.status_code}: {res.text}")
            return {"error": res.text, "status": res.status_code}
        except requests.RequestException as e:
            log.exception(f"[HTTP PUB] Exception: {e}")
            return {"error": str(e)}

    def subscribe(self, topic: str, handler):
        raise NotImplementedError("HTTPAdapter is publish-only; indexers consume over HTTP directly")
