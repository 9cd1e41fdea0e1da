"""
errors.py
Exceptions raised by svmdisk. Everything else is reported as a logged warning
and an empty or zero result.
"""


class SvmError(Exception): pass
class SourceError(SvmError): pass
class CycleError(SvmError): pass
class NoDevicesError(SvmError): pass
