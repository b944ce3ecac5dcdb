from typing import Annotated

from fastapi import Depends

from app.services.record_store.base import RecordStore
from app.services.record_store.factory import get_default_record_store


def get_store() -> RecordStore:
    return get_default_record_store()


RecordStoreDep = Annotated[RecordStore, Depends(get_store)]
