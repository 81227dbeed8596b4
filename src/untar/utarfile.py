import os

# http://www.gnu.org/software/tar/manual/html_node/Standard.html
BLOCKSIZE = 512

NAME_FIELD = (0, 100)
MODE_FIELD = (100, 8)
SIZE_FIELD = (124, 12)
CHKSUM_FIELD = (148, 8)
TYPE_OFFSET = 156

REGTYPE = "0"
AREGTYPE = "\0"
LNKTYPE = "1"
SYMTYPE = "2"
CHRTYPE = "3"
BLKTYPE = "4"
DIRTYPE = "5"
FIFOTYPE = "6"

_OCTAL_DIGITS = b"01234567"


class StreamDesyncError(Exception):
    """The archive stream can no longer be trusted to be block aligned."""


class ShortReadError(StreamDesyncError):

    def __init__(self, expected, got, cause=None):
        super().__init__(f"expected {expected}, got {got}")
        self.expected = expected
        self.got = got
        self.cause = cause


class ChecksumError(StreamDesyncError):

    def __init__(self, stored, computed):
        super().__init__(f"stored checksum {stored:o}, computed {computed:o}")
        self.stored = stored
        self.computed = computed


def roundup(val, align):
    return (val + align - 1) & ~(align - 1)


def parse_octal(field, length=None):
    """Parse an octal number, ignoring leading and trailing nonsense.

    Fields may be space or NUL terminated depending on the producer, and a
    field without any digit at all is read as 0.
    """
    if length is None:
        length = len(field)
    n = min(length, len(field))
    i = 0
    while i < n and field[i] not in _OCTAL_DIGITS:
        i += 1
    value = 0
    while i < n and field[i] in _OCTAL_DIGITS:
        value = (value << 3) + (field[i] - 0x30)
        i += 1
    return value


def _field(buf, field):
    offset, length = field
    return buf[offset:offset + length]


def is_end_of_archive(buf):
    return not any(buf[:BLOCKSIZE])


def checksum(buf):
    """Unsigned byte sum of a header block with the checksum field read as spaces."""
    offset, length = CHKSUM_FIELD
    return sum(buf[:offset]) + 0x20 * length + sum(buf[offset + length:BLOCKSIZE])


def verify_checksum(buf):
    return checksum(buf) == parse_octal(_field(buf, CHKSUM_FIELD))


class FileSection:
    """Payload of a single entry, consumed in whole blocks."""

    def __init__(self, tar, content_len):
        self.tar = tar
        self.content_len = content_len

    def __iter__(self):
        while self.content_len > 0:
            block = self.tar._read_block()
            sz = min(self.content_len, BLOCKSIZE)
            # Whole blocks are consumed, padding included
            self.content_len -= BLOCKSIZE
            yield block[:sz]

    def skip(self):
        for _ in self:
            pass


class TarInfo:

    def __init__(self, name="", type=REGTYPE, size=0, mode=0o644):
        self.name = name
        self.type = type
        self.size = size
        self.mode = mode
        self.subf = None  # Will be initialized as FileSection when needed

    @classmethod
    def frombuf(cls, buf):
        """Build a TarInfo from a header block that passed checksum verification."""
        raw_name = bytes(_field(buf, NAME_FIELD)).split(b"\0", 1)[0]
        d = cls(
            name=os.fsdecode(raw_name),
            type=chr(buf[TYPE_OFFSET]),
            size=parse_octal(_field(buf, SIZE_FIELD)),
            mode=parse_octal(_field(buf, MODE_FIELD)),
        )
        if d.type == DIRTYPE:
            # Directories never carry payload, whatever the size field says
            d.size = 0
        return d

    def blocks(self):
        return roundup(self.size, BLOCKSIZE) // BLOCKSIZE

    def __str__(self):
        return "TarInfo(%r, %r, %d)" % (self.name, self.type, self.size)


class TarFile:

    def __init__(self, name=None, fileobj=None):
        if fileobj:
            self.f = fileobj
            self._owns_f = False
        elif name is not None:
            self.f = open(name, "rb")
            self._owns_f = True
        else:
            raise ValueError("Either name or fileobj must be provided to TarFile")
        self.subf = None
        self._buf = bytearray(BLOCKSIZE)
        self._view = memoryview(self._buf)

    def _read_block(self):
        """Fill the reusable buffer with the next block or raise ShortReadError.

        A read error counts as a short read of whatever arrived before it.
        """
        got = 0
        readinto = getattr(self.f, "readinto", None)
        while got < BLOCKSIZE:
            try:
                if readinto is not None:
                    n = readinto(self._view[got:])
                else:
                    data = self.f.read(BLOCKSIZE - got)
                    n = len(data)
                    self._buf[got:got + n] = data
            except OSError as e:
                raise ShortReadError(BLOCKSIZE, got, e) from e
            if not n:
                break
            got += n
        if got < BLOCKSIZE:
            raise ShortReadError(BLOCKSIZE, got)
        return self._view

    def next(self):
        if self.subf:
            self.subf.skip()
            self.subf = None

        buf = self._read_block()

        # A single empty block ends the archive
        if is_end_of_archive(buf):
            return None

        if not verify_checksum(buf):
            raise ChecksumError(parse_octal(_field(buf, CHKSUM_FIELD)), checksum(buf))

        d = TarInfo.frombuf(buf)
        self.subf = d.subf = FileSection(self, d.size)
        return d

    def __iter__(self):
        return self

    def __next__(self):
        v = self.next()
        if v is None:
            raise StopIteration
        return v

    def extractfile(self, tarinfo):
        return tarinfo.subf

    def close(self):
        if self._owns_f:
            self.f.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
