from __future__ import annotations


class GF2Element:
    """
    A byte seen as an element of GF(2^8): bit i is the coefficient of x^i,
    and products are reduced modulo m(x) = x^8 + x^4 + x^3 + x + 1.
    """
    __slots__ = ("poly",)

    def __init__(self, backing_value: int):
        object.__setattr__(self, "poly", backing_value & 0xFF) # strip to one byte

    def __setattr__(self, name, value):
        raise AttributeError("GF2Element is immutable")

    @staticmethod
    def mod_poly() -> int:
        return 0x11B # x^8 + x^4 + x^3 + x + 1

    def add(self, other: GF2Element) -> GF2Element:
        return GF2Element(self.poly ^ other.poly)

    def xtimes(self) -> GF2Element:
        if (self.poly & 0x80) == 0x00:
            return GF2Element(self.poly << 1)
        return GF2Element((self.poly << 1) ^ self.mod_poly()) # 0x11B clears bit 8

    def multiply(self, other: GF2Element) -> GF2Element:
        result: GF2Element = GF2Element(0x00)
        lhs: GF2Element = self
        rhs: int = other.poly

        for _ in range(8):
            if (rhs & 0x01) == 1:
                result = result.add(lhs)

            lhs = lhs.xtimes()
            rhs = rhs >> 1

        return result

    def substitute(self, table: [[int]]) -> GF2Element:
        # tables are laid out as 16 rows of 16, indexed by nibble
        return GF2Element(table[self.poly // 16][self.poly % 16])

    def __add__(self, other: GF2Element) -> GF2Element:
        return self.add(other)

    def __mul__(self, other: GF2Element) -> GF2Element:
        return self.multiply(other)

    def __eq__(self, other) -> bool:
        return isinstance(other, GF2Element) and self.poly == other.poly

    def __hash__(self) -> int:
        return hash(self.poly)

    def __int__(self) -> int:
        return self.poly

    def __str__(self) -> str:
        return f"{self.poly:02x}"

    def __repr__(self) -> str:
        return f"GF2Element(0x{self.poly:02x})"


class GF2Word:
    """
    Four field bytes read as the polynomial b0 + b1*x + b2*x^2 + b3*x^3 with
    coefficients in GF(2^8), reduced modulo x^4 + 1.
    """
    __slots__ = ("elements",)

    def __init__(self, b0: int, b1: int, b2: int, b3: int):
        object.__setattr__(self, "elements", (
            GF2Element(b0), GF2Element(b1), GF2Element(b2), GF2Element(b3)
        ))

    def __setattr__(self, name, value):
        raise AttributeError("GF2Word is immutable")

    @staticmethod
    def from_elements(elements: [GF2Element]) -> GF2Word:
        if len(elements) != 4:
            raise ValueError("A word holds exactly 4 bytes")
        return GF2Word(*(e.poly for e in elements))

    @staticmethod
    def from_int(value: int) -> GF2Word:
        # big-endian, so 0x2b7e1516 has 0x2b as its first byte
        return GF2Word(*value.to_bytes(4, "big"))

    @staticmethod
    def zero() -> GF2Word:
        return GF2Word(0, 0, 0, 0)

    def add(self, other: GF2Word) -> GF2Word:
        return GF2Word.from_elements([a.add(b) for a, b in zip(self.elements, other.elements)])

    def multiply(self, other: GF2Word) -> GF2Word:
        a, b = self.elements, other.elements
        coefficients = []
        for j in range(4):
            acc = GF2Element(0)
            for k in range(4):
                acc = acc.add(a[(j - k) % 4].multiply(b[k]))
            coefficients.append(acc)
        return GF2Word.from_elements(coefficients)

    def rot_word(self) -> GF2Word:
        b = self.elements
        return GF2Word.from_elements([b[1], b[2], b[3], b[0]]) # explicit left rotate

    def substitute(self, table: [[int]]) -> GF2Word:
        return GF2Word.from_elements([e.substitute(table) for e in self.elements])

    def with_byte(self, index: int, value: GF2Element) -> GF2Word:
        elements = list(self.elements)
        elements[index] = value
        return GF2Word.from_elements(elements)

    def to_bytes(self) -> bytes:
        return bytes(e.poly for e in self.elements)

    def __getitem__(self, index: int) -> GF2Element:
        return self.elements[index]

    def __add__(self, other: GF2Word) -> GF2Word:
        return self.add(other)

    def __mul__(self, other: GF2Word) -> GF2Word:
        return self.multiply(other)

    def __eq__(self, other) -> bool:
        return isinstance(other, GF2Word) and self.elements == other.elements

    def __hash__(self) -> int:
        return hash(self.elements)

    def __str__(self) -> str:
        return "".join(str(e) for e in self.elements)

    def __repr__(self) -> str:
        return f"GF2Word(0x{str(self)})"
