"""Clients for the file service, the analysis service and the message broker."""