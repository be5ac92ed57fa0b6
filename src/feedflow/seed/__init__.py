"""种子数据文件."""
