import logging
import time
from typing import Dict, Iterator, Optional, Sequence

from elasticsearch import Elasticsearch, helpers

from imenik_scraper.models.entry import Entry
from imenik_scraper.utils import config, normalization_utils

log = logging.getLogger(__name__)


# --- Elasticsearch Client and Index Management ---

def get_es_client(hosts: Optional[str] = None) -> Elasticsearch:
    """
    Creates and returns an Elasticsearch client, retrying on connection failure.
    """
    hosts = hosts or config.ELASTICSEARCH_HOSTS
    retries = config.ELASTICSEARCH_CONNECT_RETRIES
    for i in range(retries):
        try:
            client = Elasticsearch(hosts=hosts)
            if client.ping():
                log.info("Successfully connected to Elasticsearch.")
                return client
            else:
                raise ConnectionError("Elasticsearch ping failed.")
        except Exception as e:
            log.warning(f"Elasticsearch not available, retrying ({i+1}/{retries})... Error: {e}")
            if i + 1 < retries:
                time.sleep(config.ELASTICSEARCH_RETRY_DELAY_SECONDS)
    raise ConnectionError("Could not connect to Elasticsearch after multiple retries.")


def create_index_with_mapping(client: Elasticsearch, index_name: Optional[str] = None):
    """
    Creates the entries index with a folding analyzer for Croatian names.
    Safe to call on every run.
    """
    index_name = index_name or config.ELASTICSEARCH_INDEX_NAME

    if client.indices.exists(index=index_name):
        log.info(f"Index '{index_name}' already exists. No action taken.")
        return

    log.info(f"Index '{index_name}' not found. Creating it now...")

    settings = {
        "analysis": {
            "analyzer": {
                "croatian_name_analyzer": {
                    "tokenizer": "standard",
                    "filter": [
                        "lowercase",
                        "asciifolding"  # č -> c, š -> s, ...
                    ]
                }
            }
        }
    }

    mappings = {
        "properties": {
            "fullName": {"type": "text", "analyzer": "croatian_name_analyzer"},
            "street": {"type": "text", "analyzer": "croatian_name_analyzer"},
            "city": {"type": "keyword"},
            "telephoneNumber": {"type": "keyword"},
            "normalizedTelephoneNumber": {"type": "keyword"},
        }
    }

    # Another run may create the index between the exists check and this call.
    client.options(ignore_status=400).indices.create(index=index_name, settings=settings, mappings=mappings)
    log.info(f"Index '{index_name}' created successfully.")


def entry_to_document(entry: Entry) -> Dict[str, Optional[str]]:
    document = entry.to_dict()
    document["normalizedTelephoneNumber"] = normalization_utils.normalize_phone_number(entry.telephone_number)
    return document


def _bulk_actions(entries: Sequence[Entry], index_name: str) -> Iterator[dict]:
    for entry in entries:
        yield {"_index": index_name, "_source": entry_to_document(entry)}


def save_entries_to_elasticsearch(entries: Sequence[Entry], index_name: Optional[str] = None) -> int:
    """
    Inserts the entries into the configured index and returns how many were stored.
    Missing configuration or an unreachable cluster is logged and skipped, never raised.
    """
    if not config.ELASTICSEARCH_HOSTS:
        log.error("ELASTICSEARCH_HOSTS environment variable is not set, skipping Elasticsearch export.")
        return 0

    index_name = index_name or config.ELASTICSEARCH_INDEX_NAME
    client = None
    try:
        client = get_es_client()
        create_index_with_mapping(client, index_name)

        log.info(f"Saving {len(entries)} entries to Elasticsearch index '{index_name}'...")
        stored = 0
        if entries:
            stored, _ = helpers.bulk(client, _bulk_actions(entries, index_name))
        log.info(f"Successfully saved {stored} entries to Elasticsearch.")
        return stored
    except Exception as e:
        log.error(f"Error saving results to Elasticsearch: {e}", exc_info=True)
        return 0
    finally:
        if client is not None:
            client.close()
