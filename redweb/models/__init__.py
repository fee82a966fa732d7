"""Models package - record builders and lookups over plain dict records."""
import uuid


def new_id():
    return str(uuid.uuid4())


def find_index(records, record_id):
    """Index of the record with ``record_id`` or -1. Ids compare as strings."""
    wanted = str(record_id)
    for index, record in enumerate(records):
        if str(record.get("id")) == wanted:
            return index
    return -1


def find_by_id(records, record_id):
    index = find_index(records, record_id)
    return records[index] if index != -1 else None


def merge_fields(record, data, protected):
    """Copy ``data`` onto ``record`` except for server-owned keys."""
    for key, value in data.items():
        if key in protected:
            continue
        record[key] = value
    return record
