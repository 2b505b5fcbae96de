"""
External service clients: Gemini analysis, AssemblyAI transcription and
Google Vision OCR.

Each client configures its SDK per call, so building the pipeline at import
time needs no credentials.
"""

import io
import json

import assemblyai as aai
import google.generativeai as genai
from google.cloud import vision
from google.oauth2 import service_account

from .config import SCOPES, Settings

COMPLIANCE_PROMPT = """You are a senior regulatory compliance auditor for advertising and healthcare marketing.

TASK:
Audit the given {input_type} content (category: {category}) for advertising and healthcare compliance.

REGULATIONS:
- Drugs and Magic Remedies Act, 1954 (Schedule J)
- ASCI Code & Healthcare Guidelines 2024
- Consumer Protection Act 2019
- UCPMP 2024
- IRDAI Advertising Norms (if applicable)

OUTPUT RULES:
- Return ONLY valid JSON, not wrapped in markdown
- Do NOT return code or file modifications
- Each recommendation must be actionable and replacement-based
- suggestion and solution: numbered points, at most 3 each

JSON SCHEMA:
{{
  "score": number,
  "status": "Compliant" | "Needs Review" | "Non-Compliant",
  "summary": string,
  "transcription": string,
  "financialPenalty": {{"riskLevel": "High" | "Medium" | "Low" | "None", "description": string}},
  "ethicalMarketing": {{"score": number, "assessment": string}},
  "violations": [
    {{
      "severity": "Critical" | "High" | "Medium" | "Low",
      "regulation": string,
      "description": string,
      "problematicContent": string,
      "englishTranslation": string,
      "suggestion": string,
      "solution": string
    }}
  ]
}}

ANALYSIS MODE: {analysis_mode}"""


def build_compliance_prompt(meta: dict) -> str:
    return COMPLIANCE_PROMPT.format(
        input_type=meta.get('inputType') or 'text',
        category=meta.get('category') or 'General',
        analysis_mode=meta.get('analysisMode') or 'Standard',
    )


class GeminiAnalyzer:
    """
    Compliance analysis with Gemini. Returns the raw response text.

    genai.configure() sets a process-wide key, so every call reconfigures it
    from this instance's settings right before building the model. One key
    per process is assumed; instances with different keys must not run
    concurrently in the same process.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def analyze(self, content: str, meta: dict) -> str:
        if not self.settings.gemini_api_key:
            raise RuntimeError('No Gemini API key provided')

        genai.configure(api_key=self.settings.gemini_api_key)
        model = genai.GenerativeModel(
            self.settings.gemini_model,
            generation_config={
                'temperature': self.settings.analysis_temperature,
                'max_output_tokens': 8192,
                'top_p': 0.95,
                'response_mime_type': 'application/json',
            },
        )

        response = model.generate_content([content, build_compliance_prompt(meta)])
        text = response.text
        if not text:
            raise RuntimeError('Gemini returned empty response')

        print(f"[Analysis] Gemini response length: {len(text)} chars")
        return text


class AssemblyAITranscriber:
    """
    Speech-to-text with AssemblyAI, auto language detection.

    aai.settings is module-global; the key is set from this instance's
    settings on every call, with the same one-key-per-process assumption as
    GeminiAnalyzer.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def transcribe(self, data: bytes, mime_type: str) -> dict:
        if not self.settings.assemblyai_api_key:
            raise RuntimeError('No AssemblyAI API key provided')

        aai.settings.api_key = self.settings.assemblyai_api_key

        config = aai.TranscriptionConfig(
            language_detection=True,
            punctuate=True,
            format_text=True,
        )
        transcriber = aai.Transcriber(config=config)

        print(f"[Media] Uploading {len(data)} bytes ({mime_type}) for transcription")
        transcript = transcriber.transcribe(io.BytesIO(data))

        if transcript.status == aai.TranscriptStatus.error:
            raise RuntimeError(transcript.error or 'Transcription failed')

        return {'transcript': transcript.text or ''}


def get_vision_client(settings: Settings):
    creds_json = settings.google_service_account
    if creds_json:
        creds_dict = json.loads(creds_json)
        creds = service_account.Credentials.from_service_account_info(
            creds_dict,
            scopes=SCOPES
        )
        return vision.ImageAnnotatorClient(credentials=creds)
    return vision.ImageAnnotatorClient()


class VisionOCR:
    """Text detection with Google Cloud Vision."""

    def __init__(self, settings: Settings, client_factory=None):
        self.settings = settings
        self.client_factory = client_factory or get_vision_client

    def ocr(self, data: bytes) -> str:
        client = self.client_factory(self.settings)
        response = client.text_detection(image=vision.Image(content=data))
        if response.error.message:
            raise RuntimeError(response.error.message)
        return (response.full_text_annotation.text or '').strip()
