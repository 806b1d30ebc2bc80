"""
layerforge.integrations - External Collaborators
==================================================

Everything outside this process sits behind a narrow abstract interface with
an in-memory/mock implementation for tests and a real one for production:

    installer/  - PackageInstaller (npm subprocess | mock)
    storage/    - BlobStore (S3 | in-memory)
    registry/   - LayerRegistry (AWS Lambda | in-memory)
"""
