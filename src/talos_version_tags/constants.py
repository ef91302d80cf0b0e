"""Fixed configuration values."""

# Repository holding one tag per Talos release.
DEFAULT_REPOSITORY = "ghcr.io/siderolabs/extensions"

DEFAULT_CACHE_FILE = "talos-extensions.json"

# Request timeout in seconds
DEFAULT_TIMEOUT = 30

DEFAULT_PLATFORM = "linux/amd64"

# File inside the extensions image listing every extension image reference
IMAGE_DIGESTS_FILE = "image-digests"

# Environment variables read by the command line for its defaults
CACHE_FILE_ENV = "TALOS_VERSION_TAGS_CACHE"
REPOSITORY_ENV = "TALOS_VERSION_TAGS_REPOSITORY"

MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"
MANIFEST_LIST_V2 = "application/vnd.docker.distribution.manifest.list.v2+json"
OCI_MANIFEST = "application/vnd.oci.image.manifest.v1+json"
OCI_INDEX = "application/vnd.oci.image.index.v1+json"

MANIFEST_ACCEPT = ", ".join([OCI_INDEX, MANIFEST_LIST_V2, OCI_MANIFEST, MANIFEST_V2])
INDEX_MEDIA_TYPES = (OCI_INDEX, MANIFEST_LIST_V2)
