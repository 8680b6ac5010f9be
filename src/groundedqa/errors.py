"""Error taxonomy for the question-answering pipeline.

    GroundedQAError
    +-- ConfigurationError  (missing or invalid settings)
    +-- LoaderError         (document acquisition: network, missing file, non-2xx)
    +-- ProviderError       (embedding or generation call: quota, auth, bad response)
    +-- StoreError          (persistence or search: connection, constraint)

Nothing in the pipeline retries; these exceptions propagate to the caller
of ingestion or ``ask``.
"""


class GroundedQAError(Exception):
    def __init__(self, message: str, provider_name: str | None = None) -> None:
        self.message = message
        self.provider_name = provider_name
        super().__init__(message)

    def __str__(self) -> str:
        if self.provider_name:
            return f"[{self.provider_name}] {self.message}"
        return self.message


class ConfigurationError(GroundedQAError, ValueError):
    pass


class LoaderError(GroundedQAError):
    pass


class ProviderError(GroundedQAError):
    pass


class StoreError(GroundedQAError):
    pass
