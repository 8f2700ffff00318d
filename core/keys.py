# -*- coding: utf-8 -*-
"""Single source of truth for wire/storage keys.

These are the keys used by the JSON store and the commit payloads.
Keep them stable.
"""

from __future__ import annotations


class StoreKeys:
    # roster file
    SCOPE = "scope"
    RECORDS = "records"
    UPDATED_AT = "updated_at"

    # record
    ID = "id"
    FIELDS = "fields"

    # commit result
    STATUS = "status"
    COMMITTED_VALUE = "committed_value"
    ERROR = "error"


class CommitStatus:
    OK = "ok"
    ERROR = "error"
