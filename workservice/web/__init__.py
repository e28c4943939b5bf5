"""HTTP API built on Flask."""