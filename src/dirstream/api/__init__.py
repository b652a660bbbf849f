# dirstream HTTP API layer.
# Created: 2026-10-13
#
# Versioned REST endpoints under /api/v1/, with the same routers mounted at
# /api/ as aliases for clients written against the unversioned paths.
