import enum


class Imt(enum.StrEnum):
    """
    Intensity measure types supported by the hazard calculation.

    Values follow the IM naming used throughout,
    e.g. "PGA" or "pSA_1.0"
    """

    PGA = "PGA"
    PGV = "PGV"
    SA0P01 = "pSA_0.01"
    SA0P02 = "pSA_0.02"
    SA0P03 = "pSA_0.03"
    SA0P05 = "pSA_0.05"
    SA0P075 = "pSA_0.075"
    SA0P1 = "pSA_0.1"
    SA0P15 = "pSA_0.15"
    SA0P2 = "pSA_0.2"
    SA0P25 = "pSA_0.25"
    SA0P3 = "pSA_0.3"
    SA0P4 = "pSA_0.4"
    SA0P5 = "pSA_0.5"
    SA0P75 = "pSA_0.75"
    SA1P0 = "pSA_1.0"
    SA1P5 = "pSA_1.5"
    SA2P0 = "pSA_2.0"
    SA3P0 = "pSA_3.0"
    SA4P0 = "pSA_4.0"
    SA5P0 = "pSA_5.0"
    SA7P5 = "pSA_7.5"
    SA10P0 = "pSA_10.0"

    @property
    def is_pSA(self) -> bool:
        return self.value.startswith("pSA")

    @property
    def period(self) -> float:
        """The pSA period, PGA is treated as zero period"""
        if self.is_pSA:
            return float(self.value.rsplit("_", 1)[-1])
        if self is Imt.PGA:
            return 0.0
        raise ValueError(f"IM {self} does not have a period")


class SourceType(enum.StrEnum):
    """
    Source set variants.

    Only CLUSTER is structurally different,
    all other types use the standard curve building.
    """

    FAULT = "fault"
    GRID = "grid"
    INTERFACE = "interface"
    SLAB = "slab"
    AREA = "area"
    SYSTEM = "system"
    CLUSTER = "cluster"


class SigmaModel(enum.StrEnum):
    """
    Truncation of the ground motion uncertainty
    """

    NONE = "none"
    ONE_SIDED = "one_sided"
    TWO_SIDED = "two_sided"
