"""Migrate Stable IDs Lambda

Assigns stable ids to every field of a form schema that lacks one so email
rules can keep referencing fields after the form is edited.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from common_utils import configure_logger, error_response, lambda_response
from form_rules import FormRulesError, FormSchema, add_stable_ids

logger = configure_logger(__name__)


class MigrationEvent(BaseModel):
    form_schema: Dict[str, Any] = Field(alias="schema")
    dry_run: bool = False

    model_config = ConfigDict(extra="allow")


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    try:
        ev = MigrationEvent.model_validate(event)
        schema = FormSchema.from_dict(ev.form_schema)
    except (ValidationError, FormRulesError) as exc:
        return error_response(logger, 400, "Invalid migration event", exc)

    migrated, summary = add_stable_ids(schema)
    body: Dict[str, Any] = {"dry_run": ev.dry_run, "summary": summary}
    if not ev.dry_run:
        body["schema"] = migrated.to_dict()
    logger.info("Stable id migration finished (dry_run=%s)", ev.dry_run, extra={"form_id": schema.id})
    return lambda_response(200, body)
