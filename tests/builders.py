"""Helpers that assemble bitmap list containers and token streams in memory."""

import struct

MAGIC = b"LMDBML30"


def literal(value):
    return ("literal", value)


def reference(distance, length):
    return ("reference", distance, length)


def encode_token(distance, length):
    """Packs a back-reference: high nibble and low byte hold the distance."""
    return ((distance & 0xF00) << 4) | ((length - 1) << 8) | (distance & 0xFF)


def build_token_stream(ops):
    """Encodes literal/reference ops, 16 per control word."""
    out = bytearray()
    for start in range(0, len(ops), 16):
        group = ops[start : start + 16]
        control = 0
        body = bytearray()
        for bit, op in enumerate(group):
            if op[0] == "reference":
                control |= 1 << bit
                body += struct.pack("<H", encode_token(op[1], op[2]))
            else:
                body.append(op[1])
        out += struct.pack("<H", control) + body
    return bytes(out)


def literals(data):
    return [literal(b) for b in data]


def expected_output(ops):
    """Decodes ops by indexing into the output so far."""
    out = bytearray()
    for op in ops:
        if op[0] == "reference":
            distance = op[1] or 0x1000
            for _ in range(op[2]):
                out.append(out[-distance])
        else:
            out.append(op[1])
    return bytes(out)


def raw_entry(data):
    return b"\x08" + struct.pack("<L", len(data)) + data


def compressed_entry(token_stream, decompressed_size, stored_compressed_size=None, reserved=0):
    if stored_compressed_size is None:
        stored_compressed_size = len(token_stream)
    return b"\x09" + struct.pack("<LLB", decompressed_size, stored_compressed_size, reserved) + token_stream


def build_container(entries, version=8, magic=MAGIC, reverse_layout=False):
    """
    Lays out a container with the given encoded entries.

    With `reverse_layout` the entries are stored in the file back to front
    while the offset table keeps their logical order.
    """
    header_size = 1 + 8 + 4 + 4 * len(entries)
    order = list(range(len(entries)))
    if reverse_layout:
        order.reverse()

    offsets = [0] * len(entries)
    body = bytearray()
    for index in order:
        offsets[index] = header_size + len(body)
        body += entries[index]

    header = struct.pack("<B8sL", version, magic, len(entries))
    header += struct.pack(f"<{len(entries)}L", *offsets)
    return header + bytes(body)
