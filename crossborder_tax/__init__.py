"""국경간 거래 부가가치세 자문 엔진"""

__version__ = "0.1.0"
