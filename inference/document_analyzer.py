"""
Document Analyzer - turn an uploaded infrastructure report into a partial update.

Sends a prompt naming the document and the monitored asset ids to the Gemini
generateContent REST endpoint and extracts the JSON block the model returns:

    {
      "structuredUpdate": {"dams": [...], "bridges": [...], "transformers": [...],
                           "weather": {...}, "alerts": [...]},
      "explanation": "..."
    }

The structured update is handed to SimulationEngine.ingest_document(), which
merges it. Approval of the upload happens upstream and is not checked here.
"""

import json
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.models import CitySnapshot

log = logging.getLogger("inference.document_analyzer")

DEFAULT_MODEL = "gemini-1.5-flash-latest"
_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


@dataclass
class AnalysisResult:
    """Parsed output of one document analysis."""
    update: Dict[str, Any]
    explanation: str
    raw_text: str


def extract_structured_update(text: str) -> Optional[AnalysisResult]:
    """
    Pull the structured update out of model text.

    Returns:
        AnalysisResult, or None if the text holds no parseable
        {"structuredUpdate": {...}} object
    """
    match = _JSON_BLOCK.search(text or "")
    if not match:
        return None
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        log.warning(f"Model returned malformed JSON: {e}")
        return None

    update = payload.get("structuredUpdate") if isinstance(payload, dict) else None
    if not isinstance(update, dict):
        return None
    return AnalysisResult(
        update=update,
        explanation=str(payload.get("explanation") or text),
        raw_text=text,
    )


class DocumentAnalyzer:
    """
    Gemini-backed analysis of uploaded reports.

    API key and model come from GEMINI_API_KEY / GEMINI_MODEL unless passed in.
    """

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key or os.getenv("GEMINI_API_KEY", "")
        self.model = model or os.getenv("GEMINI_MODEL", DEFAULT_MODEL)
        self.timeout = timeout
        self.session = requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.BASE_URL}/{self.model}:generateContent"

    def build_prompt(self, file_name: str, snapshot: Optional[CitySnapshot] = None) -> str:
        """Prompt listing the asset ids the model may update."""
        if snapshot is not None:
            dams = ", ".join(f"{d.id} ({d.name})" for d in snapshot.dams)
            bridges = ", ".join(f"{b.id} ({b.name})" for b in snapshot.bridges)
            transformers = ", ".join(f"{t.id} ({t.name})" for t in snapshot.transformers)
        else:
            dams = bridges = transformers = "none"
        now = datetime.now().isoformat()

        return (
            "Act as an Urban Infrastructure Analyst for Mumbai Smart City.\n"
            f'The user has uploaded a document named "{file_name}".\n'
            "Analyze the document and provide a structured JSON update for the system metrics.\n\n"
            "Available IDs:\n"
            f"Dams: {dams}\n"
            f"Bridges: {bridges}\n"
            f"Transformers: {transformers}\n\n"
            "Your response MUST be a JSON object inside a code block, formatted like this:\n"
            "{\n"
            '  "structuredUpdate": {\n'
            '    "dams": [{"id": "dam_01", "waterLevel": 85, "status": "warning"}],\n'
            '    "bridges": [{"id": "bridge_02", "loadPercent": 95, "status": "critical"}],\n'
            '    "transformers": [{"id": "tf_03", "loadPercent": 98, "status": "critical"}],\n'
            '    "weather": {"temperature": 34, "condition": "Heavy Rain"},\n'
            '    "alerts": [{"id": "new_01", "severity": "critical", '
            '"message": "AI Alert: Heavy rainfall detected in report", '
            f'"source": "AI Analysis", "timestamp": "{now}"}}]\n'
            "  },\n"
            '  "explanation": "Brief explanation of what was found in the document"\n'
            "}\n\n"
            f'Choose values that make sense based on the filename "{file_name}".\n'
            'If the filename suggests a disaster or heavy rain, make the status "critical".'
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(requests.RequestException),
        reraise=True,
    )
    def _generate(self, prompt: str) -> str:
        """POST the prompt and return the concatenated candidate text."""
        response = self.session.post(
            self.endpoint,
            params={"key": self.api_key},
            json={"contents": [{"role": "user", "parts": [{"text": prompt}]}]},
            timeout=self.timeout,
        )
        response.raise_for_status()
        data = response.json()

        candidates = data.get("candidates") or [{}]
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts).strip()

    def analyze(self, file_name: str, snapshot: Optional[CitySnapshot] = None) -> Optional[AnalysisResult]:
        """
        Analyze a document by name.

        Returns:
            AnalysisResult, or None on missing credentials, transport failure
            or a response without a structured update (all logged)
        """
        if not self.api_key:
            log.warning("GEMINI_API_KEY not set; skipping document analysis")
            return None

        prompt = self.build_prompt(file_name, snapshot)
        try:
            text = self._generate(prompt)
        except requests.RequestException as e:
            log.error(f"Document analysis request failed for {file_name}: {e}")
            return None
        except ValueError as e:
            log.error(f"Document analysis returned a non-JSON body for {file_name}: {e}")
            return None

        result = extract_structured_update(text)
        if result is None:
            log.info(f"Analysis of {file_name} produced no structured update")
        else:
            log.info(f"Analysis of {file_name} complete: {result.explanation[:80]}")
        return result
