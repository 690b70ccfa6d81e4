from tsgen.cli import tsgen

if __name__ == "__main__":
    tsgen()
