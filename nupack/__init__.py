"""nupack - 包清单模型与安装输入解析"""

__version__ = "0.3.0"
