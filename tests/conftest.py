import importlib.util
import os
import sys

import boto3
import pytest

ROOT = os.path.dirname(os.path.dirname(__file__))
sys.path.insert(0, os.path.join(ROOT, "common", "layers", "common-utils", "python"))
sys.path.insert(0, os.path.join(ROOT, "common", "layers", "form-rules-layer", "python"))


class DummySQS:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send_message(self, QueueUrl, MessageBody, **kwargs):
        if self.fail:
            from botocore.exceptions import ClientError

            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "SendMessage")
        self.sent.append({"QueueUrl": QueueUrl, "MessageBody": MessageBody})
        return {"MessageId": str(len(self.sent))}


class DummyTable:
    def __init__(self, items=None, page_size=None):
        self.items = list(items or [])
        self.page_size = page_size
        self.scans = 0

    def scan(self, **kwargs):
        self.scans += 1
        if not self.page_size:
            return {"Items": list(self.items)}
        start = kwargs.get("ExclusiveStartKey", {}).get("offset", 0)
        end = start + self.page_size
        resp = {"Items": self.items[start:end]}
        if end < len(self.items):
            resp["LastEvaluatedKey"] = {"offset": end}
        return resp


class DummyDynamo:
    def __init__(self):
        self.tables = {}

    def Table(self, name):
        return self.tables.setdefault(name, DummyTable())

    def add_table(self, name, items, page_size=None):
        self.tables[name] = DummyTable(items, page_size)
        return self.tables[name]


@pytest.fixture(autouse=True)
def no_ssm(monkeypatch):
    monkeypatch.delenv("SERVER_ENV", raising=False)
    yield


@pytest.fixture
def sqs_stub(monkeypatch):
    stub = DummySQS()
    monkeypatch.setattr(boto3, "client", lambda name, *a, **k: stub if name == "sqs" else None)
    return stub


@pytest.fixture
def dynamo_stub(monkeypatch):
    stub = DummyDynamo()
    monkeypatch.setattr(boto3, "resource", lambda name, *a, **k: stub if name == "dynamodb" else None)
    return stub


@pytest.fixture
def load_lambda():
    def _load(name, path):
        spec = importlib.util.spec_from_file_location(name, os.path.join(ROOT, path))
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    return _load


@pytest.fixture
def contact_schema():
    """A two-section enquiry form using the builder's camelCase shape."""
    return {
        "id": "form-1",
        "name": "Enquiry",
        "sections": [
            {
                "id": "s1",
                "title": "Your Details",
                "fields": [
                    {"id": "f_name", "type": "text", "label": "Full Name", "required": True},
                    {"id": "f_email", "type": "email", "label": "Email Address", "required": True},
                    {"id": "f_phone", "type": "tel", "label": "Contact Number"},
                ],
            },
            {
                "id": "s2",
                "title": "Booking",
                "fields": [
                    {"id": "f_date", "type": "date", "label": "Event Date"},
                    {
                        "id": "f_province",
                        "type": "select",
                        "label": "Province",
                        "stableId": "province",
                        "options": ["Gauteng", "Western Cape"],
                    },
                    {
                        "id": "f_notes",
                        "type": "textarea",
                        "label": "Notes",
                        "conditionalLogic": {
                            "action": "show",
                            "when": {"field": "f_province", "operator": "equals", "value": "Gauteng"},
                        },
                    },
                ],
            },
        ],
    }


@pytest.fixture
def contact_submission():
    return {
        "f_name": "Jane Doe",
        "f_email": "jane@example.com",
        "f_phone": "+27 (21) 555-0100",
        "f_date": "2025-06-01",
        "f_province": "Gauteng",
        "f_notes": "Morning please",
    }


@pytest.fixture
def welcome_template():
    return {
        "id": "tmpl-1",
        "name": "Welcome",
        "subject": "Thanks {{firstName}}",
        "htmlContent": "<p>Hi {{name}}, we will call {{phone}} about {{province}}.</p>",
        "ccEmails": "team@example.com, ",
    }


@pytest.fixture
def gauteng_rule():
    return {
        "id": "rule-1",
        "name": "Gauteng leads",
        "templateId": "tmpl-1",
        "conditions": '[{"field": "province", "operator": "equals", "value": "Gauteng"}]',
        "active": True,
        "recipientType": "formField",
        "recipientField": "email",
        "bccEmails": ["audit@example.com"],
    }
