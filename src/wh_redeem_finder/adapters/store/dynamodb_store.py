# src/wh_redeem_finder/adapters/store/dynamodb_store.py
from typing import Optional
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from ...ports.redemption_store import RedemptionStore
from ...errors import CacheUnavailableError, RedemptionConflictError

class DynamoRedemptionStore(RedemptionStore):
    """
    טבלת DynamoDB עם partition key בשם tx_hash (S) ועמודה redeem_tx_hash (S).
    put מותנה: נכתב רק אם אין רשומה או שהערך זהה, כך שכותבים מקבילים לא דורסים זה את זה.
    """
    def __init__(self, table: str, region_name: Optional[str] = None, client=None):
        self._client = client or boto3.client("dynamodb", region_name=region_name)
        self._table = table

    def get(self, tx_hash: str) -> Optional[str]:
        try:
            resp = self._client.get_item(
                TableName=self._table,
                Key={"tx_hash": {"S": tx_hash}},
                ConsistentRead=True,
            )
        except (ClientError, BotoCoreError) as e:
            raise CacheUnavailableError(f"dynamodb get_item failed: {e}") from e
        item = resp.get("Item")
        if not item:
            return None
        return item["redeem_tx_hash"]["S"]

    def put(self, tx_hash: str, redeem_tx_hash: str) -> None:
        try:
            self._client.put_item(
                TableName=self._table,
                Item={
                    "tx_hash": {"S": tx_hash},
                    "redeem_tx_hash": {"S": redeem_tx_hash},
                },
                ConditionExpression="attribute_not_exists(tx_hash) OR redeem_tx_hash = :r",
                ExpressionAttributeValues={":r": {"S": redeem_tx_hash}},
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise RedemptionConflictError(
                    f"tx {tx_hash} already has a different redeem tx, refusing {redeem_tx_hash}") from e
            raise CacheUnavailableError(f"dynamodb put_item failed: {e}") from e
        except BotoCoreError as e:
            raise CacheUnavailableError(f"dynamodb put_item failed: {e}") from e
