"""
Document store backed by DynamoDB.

Each collection lives in its own table ("<prefix>-<collection>"). Tables are
scanned and filtered/ordered in Python after the scan, which keeps every
query working without secondary indexes.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..core.config import AppConfig, COLLECTION_KEYS
from ..core.exceptions import DataStoreError
from ..core.utils import from_dynamodb, to_dynamodb

logger = logging.getLogger(__name__)


def _equals(a, b) -> bool:
    return a == b


def _not_equals(a, b) -> bool:
    return a != b


def _less(a, b) -> bool:
    return a is not None and a < b


def _less_equal(a, b) -> bool:
    return a is not None and a <= b


def _greater(a, b) -> bool:
    return a is not None and a > b


def _greater_equal(a, b) -> bool:
    return a is not None and a >= b


def _is_in(a, b) -> bool:
    return a in b


def _array_contains(a, b) -> bool:
    return isinstance(a, list) and b in a


OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    '==': _equals,
    '!=': _not_equals,
    '<': _less,
    '<=': _less_equal,
    '>': _greater,
    '>=': _greater_equal,
    'in': _is_in,
    'array-contains': _array_contains,
}

_MISSING = object()


def resolve_field(document: Dict, path: str) -> Any:
    """Look up a dotted field path ("customerData.email") in a document."""
    value: Any = document
    for part in path.split('.'):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def matches(document: Dict, field_path: str, op: str, value: Any) -> bool:
    """Evaluate one where-condition against a document."""
    try:
        predicate = OPERATORS[op]
    except KeyError:
        raise ValueError(f"Unsupported operator: {op}")

    actual = resolve_field(document, field_path)
    if actual is _MISSING:
        return False
    try:
        return predicate(actual, value)
    except TypeError:
        # Incomparable types never match, as in the hosted stores
        return False


def _sort_key(value: Any) -> Tuple[int, Any]:
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (1, value)
    return (2, str(value))


@dataclass
class Condition:
    field: str
    operator: str
    value: Any


@dataclass
class QueryResult:
    """One page of query results."""
    documents: List[Dict] = field(default_factory=list)
    last_id: Optional[str] = None
    has_more: bool = False


class DocumentStore:
    """
    Collection-oriented access to the storefront tables.
    Documents are returned as plain dicts carrying their key as "id".
    """

    def __init__(self, config: AppConfig = None, dynamodb=None):
        """
        Initialize the DynamoDB resource.

        Args:
            config: Application configuration (loaded if omitted)
            dynamodb: Pre-built boto3 DynamoDB resource, mainly for tests
        """
        self.config = config or AppConfig.load()

        if dynamodb is None:
            boto_config = Config(
                connect_timeout=5,
                read_timeout=10,
                retries={'max_attempts': 2}
            )
            session_kwargs = {'region_name': self.config.aws_region, 'config': boto_config}
            if self.config.aws_access_key and self.config.aws_secret_key:
                session_kwargs['aws_access_key_id'] = self.config.aws_access_key
                session_kwargs['aws_secret_access_key'] = self.config.aws_secret_key
            dynamodb = boto3.resource('dynamodb', **session_kwargs)

        self.dynamodb = dynamodb
        self._feeds = []

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _table(self, collection: str):
        return self.dynamodb.Table(self.config.table_name(collection))

    @staticmethod
    def key_attribute(collection: str) -> str:
        return COLLECTION_KEYS.get(collection, 'id')

    def _to_document(self, collection: str, item: Dict) -> Dict:
        document = from_dynamodb(item)
        document['id'] = document.get(self.key_attribute(collection))
        return document

    @staticmethod
    def _describe(error: Exception) -> str:
        if isinstance(error, ClientError):
            error_code = error.response.get('Error', {}).get('Code', 'Unknown')
            error_msg = error.response.get('Error', {}).get('Message', str(error))
            return f"{error_code}: {error_msg}"
        return str(error)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def create_document(self, collection: str, data: Dict, doc_id: str = None) -> str:
        """
        Add a document, generating an id when none is given.

        Returns:
            The document id
        """
        doc_id = doc_id or uuid.uuid4().hex
        self.set_document(collection, doc_id, data)
        return doc_id

    def set_document(self, collection: str, doc_id: str, data: Dict) -> None:
        """Write a whole document, replacing any existing one."""
        item = {k: v for k, v in data.items() if k != 'id'}
        item[self.key_attribute(collection)] = doc_id

        try:
            self._table(collection).put_item(Item=to_dynamodb(item))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error writing {collection}/{doc_id}: {self._describe(e)}")
            raise DataStoreError(f"Failed to save {collection} document", collection) from e

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict]:
        """Fetch a single document, or None if it does not exist."""
        try:
            response = self._table(collection).get_item(
                Key={self.key_attribute(collection): doc_id}
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error getting {collection}/{doc_id}: {self._describe(e)}")
            raise DataStoreError(f"Failed to fetch {collection} document", collection) from e

        item = response.get('Item')
        if item is None:
            return None
        return self._to_document(collection, item)

    def update_document(self, collection: str, doc_id: str, data: Dict) -> bool:
        """
        Set top-level fields on an existing document.

        Raises:
            DataStoreError: if the document does not exist or the write fails
        """
        key_attr = self.key_attribute(collection)
        updates = to_dynamodb({k: v for k, v in data.items() if k not in ('id', key_attr)})
        if not updates:
            return True

        names = {}
        values = {}
        assignments = []
        for i, (name, value) in enumerate(updates.items()):
            names[f"#k{i}"] = name
            values[f":v{i}"] = value
            assignments.append(f"#k{i} = :v{i}")
        names["#key"] = key_attr

        try:
            self._table(collection).update_item(
                Key={key_attr: doc_id},
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression="attribute_exists(#key)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
            )
            return True
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException':
                logger.warning(f"Update of missing document {collection}/{doc_id}")
                raise DataStoreError(f"No {collection} document with id {doc_id}", collection) from e
            logger.error(f"Error updating {collection}/{doc_id}: {self._describe(e)}")
            raise DataStoreError(f"Failed to update {collection} document", collection) from e
        except BotoCoreError as e:
            logger.error(f"Error updating {collection}/{doc_id}: {e}")
            raise DataStoreError(f"Failed to update {collection} document", collection) from e

    def delete_document(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Deleting a missing document is not an error."""
        try:
            self._table(collection).delete_item(Key={self.key_attribute(collection): doc_id})
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting {collection}/{doc_id}: {self._describe(e)}")
            raise DataStoreError(f"Failed to delete {collection} document", collection) from e

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_collection(self, collection: str) -> List[Dict]:
        """Scan a whole collection."""
        table = self._table(collection)
        try:
            response = table.scan()
            items = response.get('Items', [])

            # Handle pagination
            while 'LastEvaluatedKey' in response:
                response = table.scan(ExclusiveStartKey=response['LastEvaluatedKey'])
                items.extend(response.get('Items', []))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error scanning {collection}: {self._describe(e)}")
            raise DataStoreError(f"Failed to fetch {collection}", collection) from e

        logger.info(f"Loaded {len(items)} documents from {collection}")
        return [self._to_document(collection, item) for item in items]

    def fetch_where(self, collection: str, field_path: str, op: str, value: Any) -> List[Dict]:
        """Documents whose field satisfies `op value`."""
        return self.query_documents(collection, [Condition(field_path, op, value)]).documents

    def fetch_ordered(self, collection: str, field_path: str, direction: str = 'asc') -> List[Dict]:
        """All documents having the field, ordered by it."""
        return self.query_documents(
            collection, order_by=field_path, direction=direction
        ).documents

    def fetch_limited(self, collection: str, n: int) -> List[Dict]:
        """At most n documents, in scan order."""
        return self.query_documents(collection, limit=n).documents

    def query_documents(
        self,
        collection: str,
        conditions: Sequence = (),
        order_by: str = None,
        direction: str = 'asc',
        limit: int = None,
        start_after: str = None,
    ) -> QueryResult:
        """
        Filter, order and page through a collection.

        Args:
            collection: Collection name
            conditions: Condition objects or (field, operator, value) tuples
            order_by: Field path to order by; documents lacking it are dropped
            direction: 'asc' or 'desc'
            limit: Page size
            start_after: Id of the last document of the previous page

        Returns:
            QueryResult with the page, the id of its last document, and
            whether a full page was returned
        """
        if direction not in ('asc', 'desc'):
            raise ValueError(f"Invalid order direction: {direction}")

        documents = self.get_collection(collection)

        for condition in conditions:
            if not isinstance(condition, Condition):
                condition = Condition(*condition)
            documents = [
                doc for doc in documents
                if matches(doc, condition.field, condition.operator, condition.value)
            ]

        if order_by:
            documents = [doc for doc in documents if resolve_field(doc, order_by) is not _MISSING]
            documents.sort(
                key=lambda doc: _sort_key(resolve_field(doc, order_by)),
                reverse=(direction == 'desc'),
            )

        if start_after is not None:
            ids = [doc['id'] for doc in documents]
            if start_after in ids:
                documents = documents[ids.index(start_after) + 1:]

        if limit:
            documents = documents[:limit]

        return QueryResult(
            documents=documents,
            last_id=documents[-1]['id'] if documents else None,
            has_more=bool(limit) and len(documents) == limit,
        )

    # -------------------------------------------------------------------------
    # Live updates
    # -------------------------------------------------------------------------

    def subscribe(
        self,
        collection: str,
        callback: Callable[[List[Dict]], None],
        on_error: Callable[[Exception], None] = None,
        interval: float = None,
        order_by: str = None,
        direction: str = 'asc',
    ) -> Callable[[], None]:
        """
        Push the collection to callback now and whenever it changes.

        Returns:
            A function that stops the feed
        """
        from .live import LiveFeed

        def fetch():
            return self.query_documents(collection, order_by=order_by, direction=direction).documents

        feed = LiveFeed(
            fetch,
            callback,
            on_error=on_error,
            interval=interval if interval is not None else self.config.live_poll_interval,
            name=f"live-{collection}",
        )
        feed.start()
        self._feeds.append(feed)

        def unsubscribe():
            feed.stop()
            if feed in self._feeds:
                self._feeds.remove(feed)

        return unsubscribe

    def close(self) -> None:
        """Stop every live feed opened through this store."""
        for feed in list(self._feeds):
            feed.stop()
        self._feeds.clear()
