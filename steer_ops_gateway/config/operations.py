# Operation catalog defaults, grouped by rate-limit category
from typing import Any, Dict, List

# Base settings shared by every operation in a category
CATEGORY_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "authOps": {"category": "authOps", "cacheable": False},
    "storageOps": {"category": "storageOps", "cacheable": False},
    "dataOps": {"category": "dataOps", "cacheable": False},
    "hostingOps": {"category": "hostingOps", "cacheable": False},
    "global": {"category": "global", "cacheable": False},
}

# Read-only lookups are cached for the default TTL unless a shorter one is given
_READ = {"cacheable": True}


def create_operation_config(category: str, name: str, overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Create an operation entry by combining category defaults with per-operation overrides."""
    if category not in CATEGORY_DEFAULTS:
        raise ValueError(f"Unknown operation category: {category}")

    base = CATEGORY_DEFAULTS[category].copy()
    base.update(overrides)
    base["name"] = name
    return base


_OPERATIONS_BY_CATEGORY: Dict[str, Dict[str, Dict[str, Any]]] = {
    "authOps": {
        "createUser": {"description": "Create a user account"},
        "listUsers": {**_READ, "description": "List user accounts"},
        "deleteUser": {"description": "Delete a user account"},
        "updateUser": {"description": "Update user profile fields"},
        "searchUser": {**_READ, "description": "Look up a user by uid, email or phone"},
        "setCustomClaims": {"description": "Set custom claims on a user"},
        "getCustomClaims": {**_READ, "description": "Read a user's custom claims"},
        "removeCustomClaims": {"description": "Remove custom claims from a user"},
        "disableUser": {"description": "Disable a user account"},
        "enableUser": {"description": "Re-enable a disabled user account"},
        "sendPasswordReset": {"description": "Generate a password reset link"},
        "sendEmailVerification": {"description": "Generate an email verification link"},
        "bulkCreateUsers": {"description": "Create many user accounts"},
        "bulkDeleteUsers": {"description": "Delete many user accounts"},
        "exportUsers": {"mutating": False, "description": "Export user accounts"},
        "importUsers": {"description": "Import user accounts"},
    },
    "storageOps": {
        "uploadFile": {"description": "Upload a local file"},
        "uploadFromUrl": {"description": "Upload the body of a remote URL"},
        "bulkUpload": {"description": "Upload many files"},
        "downloadFile": {"mutating": False, "description": "Download a stored object"},
        "getDownloadUrl": {**_READ, "defaultTtlSeconds": 60, "description": "Create a signed download URL"},
        "getFileMetadata": {**_READ, "description": "Read object metadata"},
        "deleteFile": {"description": "Delete a stored object"},
        "listFiles": {**_READ, "description": "List objects under a prefix"},
        "moveFile": {"description": "Move or rename a stored object"},
        "updateMetadata": {"description": "Update object metadata"},
        "getBucketInfo": {**_READ, "description": "Read bucket information"},
        "createBucket": {"description": "Create a storage bucket"},
        "batchOperations": {"description": "Run a batch of storage operations"},
        "validateFile": {**_READ, "description": "Check file type and size against upload rules"},
    },
    "dataOps": {
        "queryDocuments": {**_READ, "defaultTtlSeconds": 60, "description": "Query documents in a collection"},
        "deployRules": {"description": "Deploy security rules"},
        "getDataSchema": {**_READ, "description": "Describe collections and their fields"},
    },
    "hostingOps": {
        "deployHosting": {"description": "Deploy the hosting site"},
        "deployChannel": {"description": "Deploy to a preview channel"},
        "deployTarget": {"description": "Deploy a hosting target"},
        "listSites": {**_READ, "description": "List hosting sites"},
        "listChannels": {**_READ, "description": "List preview channels"},
        "deleteChannel": {"description": "Delete a preview channel"},
        "getHostingConfig": {**_READ, "description": "Read hosting configuration"},
        "listDomains": {**_READ, "description": "List custom domains"},
        "addDomain": {"description": "Attach a custom domain"},
        "deleteDomain": {"description": "Detach a custom domain"},
        "initHosting": {"description": "Initialise hosting configuration"},
        "getHostingStatus": {**_READ, "defaultTtlSeconds": 30, "description": "Read hosting deployment status"},
        "serveHosting": {"description": "Start the local hosting server"},
        "listRewrites": {**_READ, "description": "List rewrite rules"},
        "addRewrite": {"description": "Add a rewrite rule"},
        "addHeaders": {"description": "Add response header rules"},
        "listSslCertificates": {**_READ, "description": "List SSL certificates"},
    },
    "global": {
        "deployFunctions": {"description": "Deploy cloud functions"},
        "startEmulators": {"description": "Start the local emulator suite"},
        "getFunctionLogs": {**_READ, "defaultTtlSeconds": 30, "description": "Read recent function logs"},
        "getProjectInfo": {**_READ, "description": "Read project information"},
        "listFunctions": {**_READ, "description": "List deployed functions"},
    },
}


def default_operation_entries() -> List[Dict[str, Any]]:
    """Raw catalog entries for every built-in operation."""
    return [
        create_operation_config(category, name, overrides)
        for category, operations in _OPERATIONS_BY_CATEGORY.items()
        for name, overrides in operations.items()
    ]


DEFAULT_OPERATIONS: List[Dict[str, Any]] = default_operation_entries()
