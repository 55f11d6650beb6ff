"""Allow ``python -m jacktrip_fargate``."""

from jacktrip_fargate.run import main

if __name__ == "__main__":
    main()
