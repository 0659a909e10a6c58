#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# Fail-closed fuzzing for the amf3 decoder.
#
# Generates three fuzz categories:
#   A) random VALID trees -> encode -> decode must return the same tree
#   B) every proper prefix of a valid encoding must raise ERR_END_OF_STREAM
#   C) random bytes and single-byte mutations must decode or raise
#      Amf3Error, never anything else
#
# Any failure prints a minimal repro payload and exits non-zero.

import os, sys, random, struct
from typing import Any, Dict, List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from amf3 import ERR_END_OF_STREAM, Amf3Error, decode_value

SEED = int(os.environ.get("AMF3_SEED", "4242"))
ROUNDS = int(os.environ.get("AMF3_FUZZ_ROUNDS", "5000"))
MAX_GEN_DEPTH = int(os.environ.get("AMF3_GEN_MAX_DEPTH", "5"))

random.seed(SEED)

# --- encoder (fuzz-only; the package is read-only) ---

def enc_u29(n: int) -> bytes:
    if n < 0x80:
        return bytes([n])
    if n < 0x4000:
        return bytes([(n >> 7) | 0x80, n & 0x7F])
    if n < 0x200000:
        return bytes([(n >> 14) | 0x80, ((n >> 7) & 0x7F) | 0x80, n & 0x7F])
    return bytes([(n >> 22) | 0x80, ((n >> 15) & 0x7F) | 0x80, ((n >> 8) & 0x7F) | 0x80, n & 0xFF])

class Encoder:
    def __init__(self) -> None:
        self.table: Dict[str, int] = {}
        self.count = 0
        self.parts: List[bytes] = []

    def string(self, s: str) -> None:
        # Reuse the table when possible so reference decoding gets exercised.
        if s in self.table and random.random() < 0.8:
            self.parts.append(enc_u29(self.table[s] << 1))
            return
        raw = s.encode("utf-8")
        self.parts.append(enc_u29((len(raw) << 1) | 1) + raw)
        # The decoder appends every non-empty by-value string, repeats included.
        if s:
            self.table.setdefault(s, self.count)
            self.count += 1

    def value(self, v: Any) -> None:
        if v is None:
            self.parts.append(random.choice([b"\x00", b"\x01"]))
        elif v is True:
            self.parts.append(b"\x03")
        elif v is False:
            self.parts.append(b"\x02")
        elif isinstance(v, int):
            self.parts.append(b"\x04" + enc_u29(v))
        elif isinstance(v, float):
            self.parts.append(b"\x05" + struct.pack("<d", v))
        elif isinstance(v, str):
            self.parts.append(b"\x06")
            self.string(v)
        elif isinstance(v, list):
            self.parts.append(b"\x09" + enc_u29((len(v) << 1) | 1))
            self.string("")
            for item in v:
                self.value(item)
        elif isinstance(v, dict):
            assoc = [(k, x) for k, x in v.items() if isinstance(k, str)]
            dense = [x for k, x in v.items() if isinstance(k, int)]
            self.parts.append(b"\x09" + enc_u29((len(dense) << 1) | 1))
            for k, x in assoc:
                self.string(k)
                self.value(x)
            self.string("")
            for x in dense:
                self.value(x)
        else:
            raise TypeError(type(v).__name__)

def encode(v: Any) -> bytes:
    e = Encoder()
    e.value(v)
    return b"".join(e.parts)

# --- generators ---

def rand_text(nmax: int) -> str:
    n = random.randint(0, nmax)
    out = []
    for _ in range(n):
        r = random.random()
        if r < 0.8:
            out.append(chr(random.randint(0x61, 0x66)))  # small alphabet -> repeats
        elif r < 0.95:
            out.append(chr(random.randint(0xA0, 0xD7FF)))
        else:
            out.append(chr(random.randint(0x10000, 0x10FFFF)))
    return "".join(out)

def rand_scalar() -> Any:
    r = random.random()
    if r < 0.1:
        return None
    if r < 0.2:
        return random.random() < 0.5
    if r < 0.5:
        return random.choice([random.randint(0, 0x7F), random.randint(0, 0x3FFF),
                              random.randint(0, 0x1FFFFF), random.randint(0, 0x1FFFFFFF)])
    if r < 0.7:
        return random.uniform(-1e6, 1e6)
    return rand_text(8)

def gen(depth: int) -> Any:
    if depth >= MAX_GEN_DEPTH or random.random() < 0.4:
        return rand_scalar()
    if random.random() < 0.5:
        return [gen(depth + 1) for _ in range(random.randint(0, 5))]
    d: Dict[Any, Any] = {}
    for _ in range(random.randint(1, 4)):
        k = rand_text(6)
        if k:
            d[k] = gen(depth + 1)
    if not d:
        d["k"] = rand_scalar()
    # Dense tail: decoder reports indices N-1 down to 0.
    n = random.randint(0, 3)
    for i in range(n - 1, -1, -1):
        d[i] = gen(depth + 1)
    return d

def fail(label: str, raw: bytes, detail: Any) -> None:
    print("FAIL:", label)
    print("INPUT:", raw.hex())
    print("DETAIL:", repr(detail)[:4000])
    raise SystemExit(1)

def main() -> int:
    for i in range(ROUNDS):
        tree = gen(0)
        raw = encode(tree)

        # A) decode(encode(tree)) == tree, key order included
        try:
            got = decode_value(raw)
        except Amf3Error as e:
            fail("A valid input rejected", raw, e.code)
        if got != tree or (isinstance(tree, dict) and list(got) != list(tree)):
            fail("A value mismatch", raw, {"round": i, "got": got, "want": tree})

        # B) proper prefixes fail with ERR_END_OF_STREAM
        for n in sorted(random.sample(range(len(raw)), min(len(raw), 8))):
            try:
                decode_value(raw[:n])
            except Amf3Error as e:
                if e.code != ERR_END_OF_STREAM:
                    fail("B truncation", raw[:n], e.code)
            else:
                fail("B truncation decoded", raw[:n], n)

        # C) mutations and noise never escape as non-Amf3Error
        mutated = bytearray(raw)
        mutated[random.randrange(len(mutated))] = random.getrandbits(8)
        noise = bytes(random.getrandbits(8) for _ in range(random.randint(0, 24)))
        for candidate in (bytes(mutated), noise):
            try:
                decode_value(candidate)
            except Amf3Error:
                pass
            except Exception as e:
                fail("C unexpected exception", candidate, e)

    print(f"OK: fuzz rounds={ROUNDS} seed={SEED} (no failures)")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
