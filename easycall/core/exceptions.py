# easycall/core/exceptions.py
# 核心层只在存储/解码边界抛出这些异常，并且都会在核心内部被捕获处理，
# 不会以技术错误的形式展示给最终用户。

class EasyCallError(Exception):
    """Base class for errors raised inside the easycall core."""


class StorageError(EasyCallError):
    """A key-value write (or the storage connection) failed."""


class ContactDecodeError(EasyCallError):
    """The persisted contact blob could not be decoded."""
