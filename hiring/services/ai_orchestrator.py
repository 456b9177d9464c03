import json
import logging
import time
from typing import Any, Dict, List, Optional

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from hiring.core.config import settings
from hiring.core.exceptions import AIError, AIKillSwitchError
from hiring.core.logging import request_id_var

logger = logging.getLogger(__name__)


class AIDomain:
    RESUME_PARSING = "resume_parsing"
    JOB_SCORING = "job_scoring"
    GENERAL = "general"


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object out of a model reply.
    Tries a strict parse first, then the first balanced {...} block in the text.
    Raises ValueError when no object can be recovered.
    """
    if text is None:
        raise ValueError("empty response")
    stripped = text.strip()
    try:
        parsed = json.loads(stripped)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    start = stripped.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for idx in range(start, len(stripped)):
            ch = stripped[idx]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    try:
                        parsed = json.loads(stripped[start:idx + 1])
                    except json.JSONDecodeError:
                        parsed = None
                    if isinstance(parsed, dict):
                        return parsed
                    break
        else:
            break
        # Nested objects of a broken block are never the answer
        start = stripped.find("{", idx + 1)
    raise ValueError("no JSON object found in response")


class AIOrchestrator:
    @staticmethod
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((requests.exceptions.ConnectionError, requests.exceptions.Timeout)),
        reraise=True
    )
    def _post(payload: Dict[str, Any]) -> Dict[str, Any]:
        response = requests.post(
            url=f"{settings.ai.api_base_url.rstrip('/')}/chat/completions",
            headers={
                "Authorization": f"Bearer {settings.ai.openrouter_api_key}",
                "Content-Type": "application/json",
                "HTTP-Referer": settings.cors_origins[0] if settings.cors_origins else "http://localhost",
                "X-Title": settings.app_name,
            },
            data=json.dumps(payload),
            timeout=settings.ai.timeout_seconds
        )
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _do_call(
        messages: List[Dict[str, str]],
        model_name: str,
        temperature: float = 0.2,
        json_output: bool = True
    ) -> Dict[str, Any]:
        """Single provider round-trip. Returns {"content": str, "usage": dict}."""
        logger.info(f"Calling AI Model: {model_name}")
        payload: Dict[str, Any] = {
            "model": model_name,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": settings.ai.max_tokens,
        }
        if json_output:
            payload["response_format"] = {"type": "json_object"}

        try:
            data = AIOrchestrator._post(payload)
            content = data["choices"][0]["message"].get("content") or ""
            if json_output and not content.strip():
                # Some models return nothing when forced into JSON mode
                logger.warning(f"Empty JSON-mode reply from {model_name}. Retrying without response_format.")
                payload.pop("response_format", None)
                data = AIOrchestrator._post(payload)
                content = data["choices"][0]["message"].get("content") or ""
            return {"content": content, "usage": data.get("usage") or {}}

        except requests.exceptions.Timeout:
            logger.error("AI service timeout.")
            raise AIError("AI service reached timeout limit.")
        except requests.exceptions.HTTPError as e:
            logger.error(f"AI service HTTP error: {e}")
            raise AIError(f"AI service returned error: {e.response.status_code}")
        except requests.exceptions.RequestException as e:
            logger.error(f"AI service connection error: {e}")
            raise AIError("AI service is unreachable.")
        except (KeyError, IndexError, ValueError) as e:
            logger.error(f"Malformed AI provider response: {e}")
            raise AIError("AI service returned a malformed response.")

    @classmethod
    def call_model(
        cls,
        messages: List[Dict[str, str]],
        temperature: float = 0.2,
        json_output: bool = True,
        domain: str = AIDomain.GENERAL,
        organization_id: Optional[int] = None,
        db_session: Any = None
    ) -> str:
        """
        Centralized model caller with kill switch, retries and fallback model.
        Every attempt is recorded in ai_request_logs when a session is given.
        """
        logger.info(f"AI Coordination Request | Domain: {domain}")

        if settings.ai.kill_switch:
            logger.warning("AI Kill-switch is active. Blocking request.")
            raise AIKillSwitchError()

        if not settings.ai.openrouter_api_key:
            logger.error("OpenRouter API Key missing.")
            raise AIError("AI service configuration error.")

        models = [settings.ai.model_name]
        if settings.ai.fallback_model and settings.ai.fallback_model != settings.ai.model_name:
            models.append(settings.ai.fallback_model)

        errors = []
        for model_name in models:
            started = time.perf_counter()
            try:
                result = cls._do_call(messages, model_name, temperature, json_output)
            except AIError as e:
                cls._record_request(
                    db_session, domain, model_name, {}, "error", e.message,
                    started, organization_id
                )
                logger.warning(f"Model {model_name} failed: {e.message}")
                errors.append(f"{model_name}: {e.message}")
                continue

            cls._record_request(
                db_session, domain, model_name, result.get("usage") or {}, "success", None,
                started, organization_id
            )
            return result["content"]

        logger.error(f"All AI models failed for domain {domain}")
        raise AIError("AI service completely unavailable", details={"attempts": errors})

    @classmethod
    def analyze_text(
        cls,
        system_prompt: str,
        user_content: str,
        temperature: float = 0.2,
        domain: str = AIDomain.GENERAL,
        organization_id: Optional[int] = None,
        db_session: Any = None
    ) -> Dict[str, Any]:
        """Helper for analysis tasks that expect a JSON object back."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content}
        ]
        response_text = cls.call_model(
            messages,
            temperature=temperature,
            json_output=True,
            domain=domain,
            organization_id=organization_id,
            db_session=db_session
        )
        try:
            return extract_json_object(response_text)
        except ValueError:
            logger.error(f"Failed to decode AI JSON response: {response_text[:500]}")
            raise AIError("Failed to parse AI response.")

    @staticmethod
    def _record_request(
        db: Any,
        domain: str,
        model_name: str,
        usage: Dict[str, Any],
        status: str,
        error_message: Optional[str],
        started: float,
        org_id: Optional[int]
    ):
        if db is None:
            return
        from hiring.models.ai_request_log import AIRequestLog

        try:
            db.add(AIRequestLog(
                request_type=domain,
                model=model_name,
                prompt_tokens=int(usage.get("prompt_tokens") or 0),
                completion_tokens=int(usage.get("completion_tokens") or 0),
                total_tokens=int(usage.get("total_tokens") or 0),
                status=status,
                error_message=error_message,
                latency_ms=round((time.perf_counter() - started) * 1000, 2),
                request_id=request_id_var.get() or None,
                organization_id=org_id,
            ))
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to record AI request: {e}")
