"""
Parsers for kernel module metadata.

This module reads the .modinfo section of module images (plain or
compressed with zstd, xz or gzip) and decodes the signature appended
to signed modules.
"""

import errno
import gzip
import io
import lzma
import os
import struct
import zlib
import zstandard as zstd
from typing import List, Tuple
from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile
from .exceptions import KmodInfoError, ModinfoExtractionError
from .models import ModuleHandle


SIGNATURE_MAGIC = b"~Module signature appended~\n"

# struct module_signature: algo, hash, id_type, signer_len, key_id_len, pad[3], sig_len
SIGNATURE_STRUCT = struct.Struct(">BBBBB3sI")

PKEY_ID_PKCS7 = 2
PKEY_ID_TYPES = ["PGP", "X509", "PKCS#7"]
PKEY_HASH_ALGOS = ["md4", "md5", "sha1", "rmd160", "sha256", "sha384",
                   "sha512", "sha224", "sm3"]

RawPair = Tuple[str, str]


def _decode(raw: bytes) -> str:
    return raw.decode('utf-8', errors='replace')


def _hex(raw: bytes) -> str:
    return ":".join(f"{byte:02X}" for byte in raw)


def parse_modinfo_strings(data: bytes) -> List[RawPair]:
    """
    Split NUL-separated key=value strings into raw pairs.

    Empty strings (section padding) are dropped; a string without '='
    becomes a key with an empty value.
    """
    pairs = []
    for entry in data.split(b'\x00'):
        if not entry:
            continue
        key, _, value = entry.partition(b'=')
        pairs.append((_decode(key), _decode(value)))
    return pairs


class ModinfoParser:
    """Extracts raw metadata pairs for resolved module handles."""

    def __init__(self, repository=None):
        """
        Initialize a ModinfoParser instance.

        Args:
            repository: ModuleRepository used for builtin module metadata
        """
        self.repository = repository

    def get_info(self, handle: ModuleHandle) -> List[RawPair]:
        """
        Return the metadata pairs of a module in module-defined order.

        Raises:
            ModinfoExtractionError: If the metadata cannot be read
        """
        if handle.builtin:
            if self.repository is None:
                raise ModinfoExtractionError(handle.name, "no module repository for builtin module",
                                             errno.ENOENT)
            return self.repository.get_builtin_info(handle.name)

        if not handle.path:
            raise ModinfoExtractionError(handle.name, os.strerror(errno.ENOENT), errno.ENOENT)

        data = self.read_image(handle)
        pairs = self.extract_modinfo(handle.name, data)
        pairs.extend(self.extract_signature(data))
        return pairs

    def read_image(self, handle: ModuleHandle) -> bytes:
        """Read a module image, decompressing it according to its suffix."""
        path = handle.path
        try:
            if path.endswith('.zst'):
                with open(path, 'rb') as compressed_file:
                    dctx = zstd.ZstdDecompressor()
                    with dctx.stream_reader(compressed_file) as reader:
                        return reader.read()
            if path.endswith('.xz'):
                with lzma.open(path, 'rb') as f:
                    return f.read()
            if path.endswith('.gz'):
                with gzip.open(path, 'rb') as f:
                    return f.read()
            with open(path, 'rb') as f:
                return f.read()
        except OSError as e:
            # BadGzipFile is an OSError without an errno
            code = e.errno or errno.EINVAL
            raise ModinfoExtractionError(handle.name, e.strerror or str(e), code) from e
        except (zstd.ZstdError, lzma.LZMAError, zlib.error, EOFError) as e:
            raise ModinfoExtractionError(handle.name, f"decompression failed: {e}",
                                         errno.EINVAL) from e

    def extract_modinfo(self, module_name: str, data: bytes) -> List[RawPair]:
        """
        Read the .modinfo section of an ELF image.

        Raises:
            ModinfoExtractionError: If the data is not ELF or has no .modinfo
        """
        try:
            elf = ELFFile(io.BytesIO(data))
            modinfo_section = elf.get_section_by_name('.modinfo')
            if modinfo_section is None:
                raise ModinfoExtractionError(module_name, "no .modinfo section",
                                             errno.ENODATA)
            modinfo_data = modinfo_section.data()
        except KmodInfoError:
            raise
        except (ELFError, ValueError) as e:
            raise ModinfoExtractionError(module_name, f"{os.strerror(errno.ENOEXEC)} ({e})",
                                         errno.ENOEXEC) from e

        return parse_modinfo_strings(modinfo_data)

    def extract_signature(self, data: bytes) -> List[RawPair]:
        """
        Decode the signature appended to a signed module image.

        Returns:
            List[RawPair]: sig_id, signer, sig_key, sig_hashalgo and
            signature pairs, or an empty list for unsigned modules
        """
        if not data.endswith(SIGNATURE_MAGIC):
            return []

        end = len(data) - len(SIGNATURE_MAGIC)
        if end < SIGNATURE_STRUCT.size:
            return []

        sig_end = end - SIGNATURE_STRUCT.size
        (_algo, hash_algo, id_type, signer_len, key_id_len,
         _pad, sig_len) = SIGNATURE_STRUCT.unpack(data[sig_end:end])

        total = signer_len + key_id_len + sig_len
        if total > sig_end or id_type >= len(PKEY_ID_TYPES):
            return []

        start = sig_end - total
        signer = data[start:start + signer_len]
        key_id = data[start + signer_len:start + signer_len + key_id_len]
        signature = data[start + signer_len + key_id_len:sig_end]

        algo_name = self._hash_algo_name(hash_algo)
        if id_type == PKEY_ID_PKCS7:
            # signer and key id live inside the PKCS#7 blob
            algo_name = "unknown"
            signer = b""
            key_id = b""

        return [
            ("sig_id", PKEY_ID_TYPES[id_type]),
            ("signer", _decode(signer)),
            ("sig_key", _hex(key_id)),
            ("sig_hashalgo", algo_name),
            ("signature", _hex(signature)),
        ]

    @staticmethod
    def _hash_algo_name(index: int) -> str:
        if index < len(PKEY_HASH_ALGOS):
            return PKEY_HASH_ALGOS[index]
        return "unknown"
