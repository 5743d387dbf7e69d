# student_dashboard/models/key_value.py

import json

from .base import BaseModel, db


class KeyValueEntry(BaseModel):
    """One JSON blob stored under a string key"""

    __tablename__ = "key_value_entries"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(200), unique=True, nullable=False, index=True)
    value_json = db.Column(db.Text, nullable=False)  # JSON document

    def __repr__(self):
        return f"<KeyValueEntry {self.key}>"

    def get_value(self):
        """Decode the stored JSON document"""
        return json.loads(self.value_json)

    def set_value(self, value):
        """Encode ``value`` as JSON"""
        self.value_json = json.dumps(value)
