SIGNATURE = "Best regards,\n3rd Hand Art Marketplace Team"
