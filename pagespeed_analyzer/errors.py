from __future__ import annotations


DEFAULT_ERROR_MESSAGE = "An internal server error occurred."


class AnalyzerError(RuntimeError):
    status_code = 500

    def __init__(self, message: str = DEFAULT_ERROR_MESSAGE):
        super().__init__(message)
        self.message = message


class ValidationError(AnalyzerError):
    status_code = 400


class FetchFailure(AnalyzerError):
    def __init__(self, message: str = "Failed to fetch data from PageSpeed Insights API."):
        super().__init__(message)


class GenerationFailure(AnalyzerError):
    def __init__(self, message: str = "Failed to generate analysis."):
        super().__init__(message)


class UnexpectedError(AnalyzerError):
    @classmethod
    def from_exception(cls, exc: BaseException) -> "UnexpectedError":
        return cls(str(exc) or DEFAULT_ERROR_MESSAGE)
