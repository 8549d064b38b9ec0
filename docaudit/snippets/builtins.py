"""Known global names that example code may reference without importing."""

from __future__ import annotations

_BUILTIN_TYPE_NAMES = frozenset(
    {
        # primitives and special types
        "string", "number", "boolean", "bigint", "symbol", "undefined", "null",
        "true", "false", "any", "unknown", "never", "void", "object",
        # constructors
        "Array", "Promise", "Map", "Set", "WeakMap", "WeakSet", "WeakRef", "Date",
        "RegExp", "Error", "TypeError", "ReferenceError", "SyntaxError", "RangeError",
        "EvalError", "URIError", "AggregateError", "Function", "Object", "String",
        "Number", "Boolean", "BigInt", "Symbol",
        # typed arrays and buffers
        "Uint8Array", "Int8Array", "Uint16Array", "Int16Array", "Uint32Array",
        "Int32Array", "Float32Array", "Float64Array", "BigInt64Array",
        "BigUint64Array", "Uint8ClampedArray", "ArrayBuffer", "ArrayBufferLike",
        "SharedArrayBuffer", "DataView", "Atomics",
        # iterators
        "Iterator", "AsyncIterator", "IterableIterator", "AsyncIterableIterator",
        "Generator", "AsyncGenerator",
        # namespaces and misc
        "JSON", "Math", "Reflect", "Proxy", "Intl", "globalThis", "FinalizationRegistry",
        # web platform
        "URL", "URLSearchParams", "Headers", "Request", "Response", "Blob", "File",
        "FormData", "ReadableStream", "WritableStream", "TransformStream",
        "AbortController", "AbortSignal", "TextEncoder", "TextDecoder", "EventTarget",
        "Event", "CustomEvent", "Element", "Document", "Window", "Node", "HTMLElement",
        "Console",
        # node
        "Buffer", "EventEmitter",
        # utility types
        "Record", "Partial", "Required", "Readonly", "ReadonlyArray", "Pick", "Omit",
        "Exclude", "Extract", "NonNullable", "ReturnType", "Parameters", "InstanceType",
        "ConstructorParameters", "Awaited", "ThisType", "Uppercase", "Lowercase",
        "Capitalize", "Uncapitalize", "NoInfer", "ThisParameterType", "OmitThisParameter",
        "__type",
    }
)

_BUILTIN_GLOBALS = _BUILTIN_TYPE_NAMES | frozenset(
    {
        "console", "process", "global", "window", "document", "navigator", "location",
        "history", "localStorage", "sessionStorage", "fetch", "setTimeout",
        "setInterval", "clearTimeout", "clearInterval", "requestAnimationFrame",
        "cancelAnimationFrame", "queueMicrotask", "structuredClone", "atob", "btoa",
        "encodeURIComponent", "decodeURIComponent", "encodeURI", "decodeURI",
        "parseInt", "parseFloat", "isNaN", "isFinite", "eval",
        # test runners
        "describe", "it", "test", "expect", "jest", "vi", "beforeEach", "afterEach",
        "beforeAll", "afterAll",
        # module scope
        "require", "module", "exports", "__dirname", "__filename", "import",
    }
)


def is_built_in_identifier(name: str) -> bool:
    """Return True for runtime globals and built-in type names."""
    return name in _BUILTIN_GLOBALS


__all__ = ["is_built_in_identifier"]
