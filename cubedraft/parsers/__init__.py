from cubedraft.parsers.cube_csv import parse_cube_csv

__all__ = ["parse_cube_csv"]
