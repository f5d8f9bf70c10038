#!/usr/bin/env python3
# mod1_generate_schema_sql.py
# Create a SQL file that defines the sample music catalogue schema
# (distribution zone, tables, indexes) in the order the bulk loader expects:
# zone -> tables -> indexes.

import argparse, sys

ZONE_SQL = r"""
CREATE ZONE IF NOT EXISTS Chinook WITH replicas=2, storage_profiles='default';
"""

DROP_SQL = r"""
-- drop in dependency order; failures here are tolerated by the loader
DROP TABLE IF EXISTS Track;
DROP TABLE IF EXISTS Album;
DROP TABLE IF EXISTS Artist;
DROP TABLE IF EXISTS Genre;
DROP TABLE IF EXISTS MediaType;
"""

SCHEMA_SQL = r"""
/*******************************************************************************
   Sample music catalogue schema (generated)
********************************************************************************/

CREATE TABLE Artist (
  ArtistId INT NOT NULL,
  Name     VARCHAR(120),
  PRIMARY KEY (ArtistId)
) ZONE Chinook;

CREATE TABLE Album (
  AlbumId  INT NOT NULL,
  Title    VARCHAR(160) NOT NULL,
  ArtistId INT NOT NULL,
  PRIMARY KEY (AlbumId, ArtistId)
) COLOCATE BY (ArtistId) ZONE Chinook;

CREATE TABLE Genre (
  GenreId INT NOT NULL,
  Name    VARCHAR(120),
  PRIMARY KEY (GenreId)
) ZONE Chinook;

CREATE TABLE MediaType (
  MediaTypeId INT NOT NULL,
  Name        VARCHAR(120),
  PRIMARY KEY (MediaTypeId)
) ZONE Chinook;

CREATE TABLE Track (
  TrackId      INT NOT NULL,
  Name         VARCHAR(200) NOT NULL,
  AlbumId      INT,
  MediaTypeId  INT NOT NULL,
  GenreId      INT,
  Composer     VARCHAR(220),
  Milliseconds INT NOT NULL,
  Bytes        INT,
  UnitPrice    NUMERIC(10,2) NOT NULL,
  PRIMARY KEY (TrackId, AlbumId)
) COLOCATE BY (AlbumId) ZONE Chinook;

CREATE INDEX IF NOT EXISTS idx_album_artist ON Album (ArtistId);
CREATE INDEX IF NOT EXISTS idx_track_album ON Track (AlbumId);
CREATE INDEX IF NOT EXISTS idx_track_genre ON Track (GenreId);
"""

def build_schema(with_zone=True, with_drops=False):
  parts = []
  if with_drops:
    parts.append(DROP_SQL.strip())
  if with_zone:
    parts.append(ZONE_SQL.strip())
  parts.append(SCHEMA_SQL.strip())
  return "\n\n".join(parts) + "\n"

def main(argv=None):
  ap = argparse.ArgumentParser()
  ap.add_argument("--out", default="schema_catalogue.sql")
  ap.add_argument("--no-zone", action="store_true", help="omit CREATE ZONE")
  ap.add_argument("--drop", action="store_true", help="prepend DROP TABLE statements")
  args = ap.parse_args(argv)
  with open(args.out, "w", encoding="utf-8") as f:
    f.write(build_schema(with_zone=not args.no_zone, with_drops=args.drop))
  print(f"[OK] wrote {args.out}")
  return 0

if __name__ == "__main__":
  sys.exit(main())
