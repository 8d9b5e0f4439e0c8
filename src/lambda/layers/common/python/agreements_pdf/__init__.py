"""Agreement PDF generator shared package (Lambda layer).

Turns accepted agreement events into encrypted PDFs in S3.
"""

__version__ = "0.1.0"
