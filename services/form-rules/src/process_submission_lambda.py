# ---------------------------------------------------------------------------
# process_submission_lambda.py
# ---------------------------------------------------------------------------
"""Process Submission Lambda

Maps a form submission to canonical fields, evaluates the form's email
automation rules and queues every rendered email for the mail sender.
"""

import json
import os
from decimal import Decimal
from typing import Any, Dict, List

import boto3
from botocore.exceptions import ClientError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from common_utils import configure_logger, error_response, lambda_response, log_exception, to_jsonable
from common_utils.get_ssm import get_config
from form_rules import EmailRule, EmailTemplate, FormRulesError, FormSchema, process_submission

# Module Metadata
__author__ = "Koushik Sinha"
__version__ = "1.0.0"
__modified_by__ = "Koushik Sinha"

logger = configure_logger(__name__)

RULES_TABLE = get_config("RULES_TABLE") or os.environ.get("RULES_TABLE", "")
TEMPLATES_TABLE = get_config("TEMPLATES_TABLE") or os.environ.get("TEMPLATES_TABLE", "")
DEST_QUEUE_URL = get_config("DEST_QUEUE_URL") or os.environ.get("DEST_QUEUE_URL", "")
DEFAULT_FROM_EMAIL = get_config("DEFAULT_FROM_EMAIL") or os.environ.get("DEFAULT_FROM_EMAIL", "")

_sqs = boto3.client("sqs")
_dynamo = boto3.resource("dynamodb")


class SubmissionEvent(BaseModel):
    form_id: str | None = None
    submission_id: str | None = None
    form_schema: Dict[str, Any] = Field(alias="schema")
    data: Dict[str, Any] = {}
    rules: List[Dict[str, Any]] | None = None
    templates: List[Dict[str, Any]] | None = None

    model_config = ConfigDict(extra="allow")


# ─── Helper Functions ──────────────────────────────────────────────────────

def _plain(value: Any) -> Any:
    """Convert DynamoDB ``Decimal`` numbers back to ``int``/``float``."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def _scan(table_name: str) -> List[Dict[str, Any]]:
    table = _dynamo.Table(table_name)
    resp = table.scan()
    items = resp.get("Items", [])
    while resp.get("LastEvaluatedKey"):
        resp = table.scan(ExclusiveStartKey=resp["LastEvaluatedKey"])
        items.extend(resp.get("Items", []))
    return [_plain(i) for i in items]


def _load_rules(form_id: str | None) -> List[Dict[str, Any]]:
    if not RULES_TABLE:
        return []
    items = _scan(RULES_TABLE)
    return [i for i in items if not i.get("formId") or i.get("formId") == form_id]


def _load_templates() -> List[Dict[str, Any]]:
    if not TEMPLATES_TABLE:
        return []
    return _scan(TEMPLATES_TABLE)


def _send(message: Dict[str, Any]) -> bool:
    if not DEST_QUEUE_URL:
        logger.warning("DEST_QUEUE_URL not configured; email for rule %s not queued", message["rule_id"])
        return False
    try:
        _sqs.send_message(QueueUrl=DEST_QUEUE_URL, MessageBody=json.dumps(message))
    except ClientError as exc:
        log_exception("Failed to queue email", exc, logger, rule_id=message["rule_id"])
        return False
    return True


def _process_event(event: SubmissionEvent) -> Dict[str, Any]:
    """Run the submission pipeline and queue the resulting emails.

    1. Builds the schema, rules and templates from the event, falling back to
       the DynamoDB tables when rules or templates are not supplied.
    2. Runs :func:`form_rules.process_submission`.
    3. Sends one SQS message per outgoing email.
    """
    schema = FormSchema.from_dict(event.form_schema)
    form_id = event.form_id or schema.id
    raw_rules = event.rules if event.rules is not None else _load_rules(form_id)
    raw_templates = event.templates if event.templates is not None else _load_templates()
    rules = [EmailRule.from_dict(r) for r in raw_rules]
    templates = [EmailTemplate.from_dict(t) for t in raw_templates]
    logger.info(
        "Processing submission with %d rule(s) and %d template(s)",
        len(rules),
        len(templates),
        extra={"form_id": form_id, "submission_id": event.submission_id},
    )

    extra = {"form_id": form_id, "submission_id": event.submission_id}
    result = process_submission(
        schema,
        event.data,
        rules,
        templates,
        extra={k: v for k, v in extra.items() if v is not None},
    )

    queued = 0
    for email in result.emails:
        message = to_jsonable(email)
        message.update(
            {
                "form_id": form_id,
                "submission_id": event.submission_id,
                "from": DEFAULT_FROM_EMAIL or None,
            }
        )
        if _send(message):
            queued += 1

    return {
        "form_id": form_id,
        "submission_id": event.submission_id,
        "normalized": result.normalized,
        "validation": result.validation,
        "fired_rules": result.fired_rules,
        "emails_queued": queued,
        "skipped": result.skipped,
    }


def _handle(payload: Dict[str, Any]) -> Dict[str, Any]:
    try:
        event = SubmissionEvent.model_validate(payload)
    except ValidationError as exc:
        return error_response(logger, 400, "Invalid submission event", exc)
    try:
        return lambda_response(200, _process_event(event))
    except FormRulesError as exc:
        return error_response(logger, 400, "Invalid form definition", exc)


def lambda_handler(event: Dict[str, Any], context: Any) -> Any:
    """Entry point supporting SQS events."""
    if isinstance(event, dict) and "Records" in event:
        return [_handle(json.loads(r.get("body", "{}"))) for r in event["Records"]]
    return _handle(event)
