# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations, event classification table, and archive constants."""

from enum import StrEnum


class OperationCategory(StrEnum):
    READ = "READ"
    WRITE = "WRITE"
    DELETE = "DELETE"
    OTHER = "OTHER"


class FailureKind(StrEnum):
    MERGE_CONFLICT = "merge_conflict"
    STORE_UNAVAILABLE = "store_unavailable"
    STORAGE_ERROR = "storage_error"
    DEADLINE_EXCEEDED = "deadline_exceeded"


class TimestampFallback(StrEnum):
    CURRENT_WEEK = "current_week"
    REJECT = "reject"


class StoreBackend(StrEnum):
    MEMORY = "memory"
    SQLITE = "sqlite"


# Only events emitted by this service are inspected by the relevance filter.
MONITORED_EVENT_SOURCE = "s3.amazonaws.com"

# Resource identifiers are ARNs in this namespace, objects follow a "/".
RESOURCE_ARN_PREFIX = "arn:aws:s3:::"
RESOURCE_PATH_SEPARATOR = "/"

UNKNOWN = "Unknown"

SUPPORTED_WEEK_NUMBERING = frozenset({"iso"})

EVENT_CATEGORIES: dict[str, OperationCategory] = {
    # Retrieval
    "GetObject": OperationCategory.READ,
    "GetObjectAcl": OperationCategory.READ,
    "GetObjectAttributes": OperationCategory.READ,
    "GetObjectTagging": OperationCategory.READ,
    "GetObjectRetention": OperationCategory.READ,
    "GetObjectLegalHold": OperationCategory.READ,
    "HeadObject": OperationCategory.READ,
    "HeadBucket": OperationCategory.READ,
    "SelectObjectContent": OperationCategory.READ,
    "ListBucket": OperationCategory.READ,
    "ListObjects": OperationCategory.READ,
    "ListObjectsV2": OperationCategory.READ,
    "ListObjectVersions": OperationCategory.READ,
    "ListMultipartUploads": OperationCategory.READ,
    "ListParts": OperationCategory.READ,
    "GetBucketLocation": OperationCategory.READ,
    "GetBucketVersioning": OperationCategory.READ,
    # Creation, overwrite, copy, restore
    "PutObject": OperationCategory.WRITE,
    "CopyObject": OperationCategory.WRITE,
    "RestoreObject": OperationCategory.WRITE,
    "CreateMultipartUpload": OperationCategory.WRITE,
    "UploadPart": OperationCategory.WRITE,
    "UploadPartCopy": OperationCategory.WRITE,
    "CompleteMultipartUpload": OperationCategory.WRITE,
    "PutObjectAcl": OperationCategory.WRITE,
    "PutObjectTagging": OperationCategory.WRITE,
    "PutObjectRetention": OperationCategory.WRITE,
    "PutObjectLegalHold": OperationCategory.WRITE,
    "PutBucketVersioning": OperationCategory.WRITE,
    "CreateBucket": OperationCategory.WRITE,
    # Deletion
    "DeleteObject": OperationCategory.DELETE,
    "DeleteObjects": OperationCategory.DELETE,
    "DeleteObjectTagging": OperationCategory.DELETE,
    "AbortMultipartUpload": OperationCategory.DELETE,
    "DeleteBucket": OperationCategory.DELETE,
}

DEFAULT_TOP_N = 10
