"""HTTP layer of the files app: thin views over ``logic``."""
