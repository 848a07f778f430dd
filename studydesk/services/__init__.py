# studydesk/services/__init__.py
from flask import current_app

EXTENSION_KEY = "studydesk"


class AppServices:
    """Collaborators built once per app and handed to request handlers."""

    def __init__(self, *, sessions, uploads, reclaimer):
        from ..models import FileAsset, Note, Resource, Task, Topic
        from .records import FileSlot, RecordStore

        self.sessions = sessions
        self.uploads = uploads
        self.reclaimer = reclaimer

        self.tasks = RecordStore(
            Task,
            uploads=uploads,
            fields=("title", "category", "completed"),
            required=("title", "category"),
            flags=("completed",),
        )
        self.files = RecordStore(
            FileAsset,
            uploads=uploads,
            fields=("category",),
            required=("category",),
            file_slots=(FileSlot("filename", "file", required=True),),
            label="File",
        )
        self.resources = RecordStore(
            Resource,
            uploads=uploads,
            fields=("title", "link"),
            required=("title", "link"),
            file_slots=(FileSlot("image", "image", image=True),),
        )
        self.notes = RecordStore(
            Note,
            uploads=uploads,
            fields=("content",),
            required=("content",),
            required_on_update=("content",),
        )
        # shared catalog: no owner filter
        self.topics = RecordStore(
            Topic,
            uploads=uploads,
            fields=("subject", "subtopic", "explanation", "link"),
            required=("subject", "subtopic", "explanation"),
            required_on_update=("subject", "subtopic", "explanation"),
            file_slots=(FileSlot("image", "image", image=True),),
            owner_field=None,
        )


def init_services(app) -> AppServices:
    from .session_store import make_session_store
    from .storage_service import Reclaimer, UploadStore

    cfg = app.config
    reclaimer = Reclaimer(max_workers=int(cfg.get("RECLAIM_WORKERS", 1)))
    uploads = UploadStore(
        cfg["UPLOAD_FOLDER"],
        reclaimer,
        url_prefix=cfg.get("UPLOAD_URL_PREFIX", "/uploads"),
        allowed_extensions=cfg.get("ALLOWED_EXTENSIONS"),
        image_extensions=cfg.get("ALLOWED_IMAGE_EXTENSIONS"),
    )
    services = AppServices(
        sessions=make_session_store(cfg),
        uploads=uploads,
        reclaimer=reclaimer,
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> AppServices:
    return current_app.extensions[EXTENSION_KEY]
