#!/usr/bin/env python3
"""
Upload a content corpus JSON file to Cloud Firestore.

Creates collections:
  - content            (document ID = content id; is_active defaults to true)
  - domain_reputation  (document ID = domain)
  - engagement_stats   (document ID = content id)

Requires:
  - A Firebase service account JSON key (--credentials or FIREBASE_CREDENTIALS_PATH).

Usage:
  From repo root:
    python -m discovery_api.scripts.upload_content_to_firestore --credentials path/to/serviceAccountKey.json
  Custom corpus:
    python -m discovery_api.scripts.upload_content_to_firestore --content-path data/content.json
"""

import argparse
import json
import os
import sys
from pathlib import Path

from firebase_admin import firestore

from discovery.models import Content, DomainReputation
from discovery_api.services.firestore_client import ensure_firebase_app

_REPO_ROOT = Path(__file__).resolve().parent.parent.parent

BATCH_SIZE = 500  # Firestore batch write limit


def _load_json(path: Path) -> dict:
    with open(path) as f:
        data = json.load(f)
    return {"content": data} if isinstance(data, list) else data


def _content_doc(raw: dict) -> dict:
    """Validate through the Content model so Firestore holds the same shape the stores read."""
    c = Content.model_validate(raw)
    data = c.model_dump(exclude={"id"}, exclude_none=True)
    return data


def _upload(db, collection: str, docs: list) -> int:
    coll = db.collection(collection)
    total = 0
    for i in range(0, len(docs), BATCH_SIZE):
        batch = db.batch()
        chunk = docs[i: i + BATCH_SIZE]
        for doc_id, data in chunk:
            batch.set(coll.document(doc_id), data)
            total += 1
        batch.commit()
        print(f"  {collection}: committed batch {i // BATCH_SIZE + 1} ({len(chunk)} docs)")
    return total


def main() -> int:
    parser = argparse.ArgumentParser(description="Upload content corpus to Firestore")
    parser.add_argument(
        "--content-path",
        type=str,
        default=os.environ.get("CONTENT_JSON_PATH", str(_REPO_ROOT / "data" / "content.json")),
        help="JSON file with content[], domains[], engagement_stats[] (or a bare content list)",
    )
    parser.add_argument(
        "--credentials",
        type=str,
        default=os.environ.get("FIREBASE_CREDENTIALS_PATH"),
        metavar="PATH",
        help="Path to Firebase service account JSON key.",
    )
    parser.add_argument("--project-id", type=str, default=os.environ.get("FIREBASE_PROJECT_ID"))
    args = parser.parse_args()

    content_path = Path(args.content_path)
    if not content_path.is_file():
        print(f"Content file not found: {content_path}")
        return 1
    if not args.credentials:
        print("Provide --credentials PATH or set FIREBASE_CREDENTIALS_PATH.")
        return 1
    cred_path = Path(args.credentials)
    if not cred_path.is_absolute():
        cred_path = (_REPO_ROOT / cred_path).resolve()
    if not cred_path.exists():
        print(f"Credentials file not found: {cred_path}")
        return 1

    print("Loading data...")
    data = _load_json(content_path)
    content_docs = [(c["id"], _content_doc(c)) for c in data.get("content", []) if c.get("id")]
    domain_docs = []
    for d in data.get("domains", []):
        rep = DomainReputation.model_validate(d)
        domain_docs.append((rep.domain, rep.model_dump(exclude={"domain"})))
    stats_docs = [
        (
            s["content_id"],
            {
                "total_duration_seconds": float(s.get("avg_duration_seconds") or 0) * int(s.get("sample_count") or 0),
                "sample_count": int(s.get("sample_count") or 0),
            },
        )
        for s in data.get("engagement_stats", [])
        if s.get("content_id")
    ]
    print(f"  {len(content_docs)} content, {len(domain_docs)} domains, {len(stats_docs)} engagement stats")

    print("Initializing Firebase Admin...")
    ensure_firebase_app(cred_path, args.project_id)
    db = firestore.client()

    print("Uploading to Firestore...")
    n_content = _upload(db, "content", content_docs)
    n_domains = _upload(db, "domain_reputation", domain_docs)
    n_stats = _upload(db, "engagement_stats", stats_docs)
    print(f"Done. content={n_content}, domains={n_domains}, engagement_stats={n_stats}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
