from __future__ import annotations
from typing import Any, Dict, List, Optional
import requests
from esghub.utils.config import AppConfig
from esghub.utils.exception import NetworkError, ServiceError
from esghub.utils.logger import logger
from esghub.utils.types import Document


def document_from_api(item: Dict[str, Any]) -> Document:
    try:
        return Document(
            id=str(item["id"]),
            title=item.get("title") or item.get("fileName") or "Untitled report",
            file_name=item.get("fileName", ""),
            file_path=item.get("filePath"),
            category=item.get("category") or "Uncategorized",
            description=item.get("description") or "",
            upload_date=item.get("uploadDate") or "",
            source_count=int(item.get("sourceCount", item.get("sources", 0)) or 0),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ServiceError(f"Document store returned an invalid record: {e}") from e


class DocumentStoreClient:
    """Client for the external HTTP service that stores uploaded reports."""

    def __init__(self, config: AppConfig, session: Optional[requests.Session] = None):
        self.base_url = config.docstore_url.rstrip("/")
        self.timeout = config.request_timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise NetworkError(f"Could not reach the document store: {e}") from e
        if not response.ok:
            raise ServiceError(f"Document store request failed: {method} {path} -> HTTP {response.status_code}")
        return response

    def _json(self, response: requests.Response):
        try:
            return response.json()
        except ValueError as e:
            raise ServiceError("Document store returned a malformed response.") from e

    def list_documents(self) -> List[Document]:
        data = self._json(self._request("GET", "/api/pdfs"))
        if not isinstance(data, list):
            raise ServiceError("Document store returned an unexpected document list.")
        docs = [document_from_api(item) for item in data]
        docs.sort(key=lambda d: d.upload_date, reverse=True)
        logger.debug("Fetched %d document(s) from store", len(docs))
        return docs

    def upload(self, data: bytes, file_name: str, title: str, category: str) -> Document:
        files = {"pdf": (file_name, data, "application/pdf")}
        form = {"title": title or file_name, "category": category or "Uncategorized"}
        payload = self._json(self._request("POST", "/api/upload", files=files, data=form))
        if isinstance(payload, dict) and isinstance(payload.get("pdf"), dict):
            payload = payload["pdf"]
        if not isinstance(payload, dict):
            raise ServiceError("Document store returned an unexpected upload response.")
        doc = document_from_api(payload)
        logger.info("Uploaded %s as document %s", file_name, doc.id)
        return doc

    def file_url(self, document: Document) -> Optional[str]:
        if not document.file_path:
            return None
        return f"{self.base_url}{document.file_path}"

    def fetch_pdf(self, document: Document) -> bytes:
        url = self.file_url(document)
        if not url:
            raise ServiceError(f"Document {document.id} has no stored file.")
        return self._request("GET", url).content
