"""cpm - C/C++ 多仓库包管理器"""

__version__ = "0.5.0"
