from flask import current_app

from redweb.store import JsonFileStore


class RecordStoreExtension:
    """Flask wiring for the record store, in the style of ``db.init_app``."""

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        store = app.config.get("RECORD_STORE")
        if store is None:
            store = JsonFileStore(
                app.config["DATA_DIR"],
                lock_collections=app.config.get("LOCK_COLLECTIONS", True),
            )
        store.initialize()
        app.extensions["record_store"] = store
        return store


store_ext = RecordStoreExtension()


def get_store():
    return current_app.extensions["record_store"]
