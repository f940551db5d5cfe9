SERVICE_NAME = "redelivery_guard"
