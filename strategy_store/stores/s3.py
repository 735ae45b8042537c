"""
Object store adapter backed by an S3 bucket.

Object layout:

    <root_folder>/pipeline-strategies/<id>/pipeline-strategy-metadata.json
    <root_folder>/pipeline-strategies/last-modified.json

Listing has to enumerate the prefix and download objects, so it is slow and
meant to be driven by StrategyCache rather than called per request. The
adapter remembers the ETag of every object it has parsed and only downloads
objects whose ETag changed since the last enumeration.
"""

import json
import logging
import threading
from typing import Dict, List, Optional, Tuple

from ..core import BucketGateway
from ..exceptions import NotFoundError, StoreUnavailableError, ValidationError
from ..models import PipelineStrategy
from ..utils import current_time_millis
from .base import StrategyStore

logger = logging.getLogger(__name__)

OBJECT_TYPE_FOLDER = "pipeline-strategies"
METADATA_FILENAME = "pipeline-strategy-metadata.json"
LAST_MODIFIED_FILENAME = "last-modified.json"


class S3StrategyStore(StrategyStore):
    """Strategy adapter over a BucketGateway."""

    consistent_listing = False

    def __init__(self, gateway: BucketGateway, root_folder: str):
        """Initialize the adapter.

        Args:
            gateway: Gateway for the strategies bucket
            root_folder: Key prefix shared by all objects of this store
        """
        self.gateway = gateway
        self.root_folder = root_folder.strip('/')
        self._parsed: Dict[str, Tuple[Optional[str], PipelineStrategy]] = {}
        self._parsed_lock = threading.Lock()

    @property
    def prefix(self) -> str:
        if self.root_folder:
            return f"{self.root_folder}/{OBJECT_TYPE_FOLDER}/"
        return f"{OBJECT_TYPE_FOLDER}/"

    def key_for(self, strategy_id: str) -> str:
        return f"{self.prefix}{strategy_id}/{METADATA_FILENAME}"

    @property
    def last_modified_key(self) -> str:
        return f"{self.prefix}{LAST_MODIFIED_FILENAME}"

    def put(self, strategy: PipelineStrategy) -> None:
        strategy_id = self._require_id(strategy)
        key = self.key_for(strategy_id)
        etag = self.gateway.put_object(key, strategy.to_json_bytes())
        self._remember(key, etag, strategy)
        self._touch_last_modified()
        logger.debug(f"Stored strategy {strategy_id} at s3://{self.gateway.bucket_name}/{key}")

    def get(self, strategy_id: str) -> PipelineStrategy:
        key = self.key_for(strategy_id)
        result = self.gateway.get_object(key)
        if result is None:
            raise NotFoundError(f"No strategy found with id {strategy_id}", strategy_id)
        body, etag = result
        strategy = PipelineStrategy.from_json_bytes(body)
        self._remember(key, etag, strategy)
        return strategy

    def delete(self, strategy_id: str) -> None:
        key = self.key_for(strategy_id)
        self.gateway.delete_object(key)
        with self._parsed_lock:
            self._parsed.pop(key, None)
        self._touch_last_modified()
        logger.debug(f"Deleted strategy {strategy_id} from s3://{self.gateway.bucket_name}/{key}")

    def list_all(self) -> List[PipelineStrategy]:
        """
        Enumerate every strategy object under the prefix.

        Objects whose ETag matches the last parsed version are not downloaded
        again. Objects that vanish between listing and download, or that no
        longer parse, are skipped.
        """
        listed = [
            entry for entry in self.gateway.list_objects(self.prefix)
            if entry['Key'].endswith(f"/{METADATA_FILENAME}")
        ]

        with self._parsed_lock:
            known = dict(self._parsed)

        refreshed: Dict[str, Tuple[Optional[str], PipelineStrategy]] = {}
        downloaded = 0
        for entry in listed:
            key = entry['Key']
            etag = entry.get('ETag')
            cached = known.get(key)
            if cached is not None and etag is not None and cached[0] == etag:
                refreshed[key] = cached
                continue

            result = self.gateway.get_object(key)
            if result is None:
                logger.debug(f"Object {key} disappeared before it could be read")
                continue
            body, body_etag = result
            try:
                strategy = PipelineStrategy.from_json_bytes(body)
            except ValidationError as e:
                logger.warning(f"Skipping unreadable object {key}: {e}")
                continue
            refreshed[key] = (body_etag or etag, strategy)
            downloaded += 1

        with self._parsed_lock:
            self._parsed = refreshed

        logger.debug(
            f"Listed {len(refreshed)} strategies from s3://{self.gateway.bucket_name}/{self.prefix} "
            f"({downloaded} downloaded)"
        )
        return [strategy.model_copy(deep=True) for _, strategy in refreshed.values()]

    def last_modified(self) -> Optional[int]:
        """Return the epoch-millisecond time of the last write or delete, if recorded."""
        result = self.gateway.get_object(self.last_modified_key)
        if result is None:
            return None
        try:
            return int(json.loads(result[0])['lastModified'])
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring malformed {self.last_modified_key}: {e}")
            return None

    def _touch_last_modified(self) -> None:
        # The document write already succeeded; a stale marker only delays
        # other readers until the next write or forced full listing.
        body = json.dumps({'lastModified': current_time_millis()}).encode('utf-8')
        try:
            self.gateway.put_object(self.last_modified_key, body)
        except StoreUnavailableError as e:
            logger.warning(f"Could not update {self.last_modified_key}: {e}")

    def _remember(self, key: str, etag: Optional[str], strategy: PipelineStrategy) -> None:
        if etag is None:
            return
        with self._parsed_lock:
            self._parsed[key] = (etag, strategy.model_copy(deep=True))
